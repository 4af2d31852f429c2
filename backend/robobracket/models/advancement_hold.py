from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, SQLModel


class AdvancementHold(SQLModel, table=True):
    """Automatic advancement of a category is stopped until an administrator clears this row."""

    __table_args__ = (
        SAUniqueConstraint("event_id", "category_id", name="uq_advancement_hold"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="event.id", index=True)
    category_id: str
    match_id: Optional[int] = Field(default=None)  # Match whose advancement failed
    detail: str
    created_at: datetime = Field(default_factory=datetime.utcnow)
