from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from robobracket.models.event import Event


class CategoryResult(SQLModel, table=True):
    """Final placing of a category bracket. One row per (event, category, education level)."""

    __table_args__ = (
        SAUniqueConstraint("event_id", "category_id", "education_level", name="uq_category_result"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="event.id", index=True)
    category_id: str
    education_level: str = Field(default="")  # "" when the bracket is not split
    champion_team_id: int = Field(foreign_key="team.id")
    runner_up_team_id: Optional[int] = Field(default=None, foreign_key="team.id")
    confirmed_at: datetime = Field(default_factory=datetime.utcnow)

    event: "Event" = Relationship(back_populates="results")
