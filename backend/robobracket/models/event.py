from datetime import date, datetime
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from robobracket.models.category_result import CategoryResult
    from robobracket.models.match import Match
    from robobracket.models.team import Team


class Event(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    location: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: Optional[str] = None
    # Flipped once any category reports its champion
    winners_confirmed: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    teams: List["Team"] = Relationship(back_populates="event")
    matches: List["Match"] = Relationship(back_populates="event")
    results: List["CategoryResult"] = Relationship(back_populates="event")
