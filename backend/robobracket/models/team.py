from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from robobracket.models.event import Event


class Team(SQLModel, table=True):
    __table_args__ = (
        SAUniqueConstraint("event_id", "category_id", "name", name="uq_category_team_name"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="event.id", index=True)
    category_id: str = Field(index=True)  # Category slug, e.g. "sumo-rc"
    name: str
    seed: Optional[int] = Field(default=None)  # 1-based seed (1=strongest)
    education_level: Optional[str] = Field(default=None)  # Partition tag for split brackets
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    event: "Event" = Relationship(back_populates="teams")
