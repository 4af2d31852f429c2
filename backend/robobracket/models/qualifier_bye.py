from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, SQLModel


class QualifierBye(SQLModel, table=True):
    """A team sitting out one qualifier round (odd team count)."""

    __table_args__ = (
        SAUniqueConstraint("event_id", "category_id", "round", "team_id", name="uq_qualifier_bye"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="event.id", index=True)
    category_id: str
    round: int
    team_id: int = Field(foreign_key="team.id")
    education_level: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)
