from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from robobracket.models.event import Event
    from robobracket.models.team import Team

STAGE_GROUP = "group"
STAGE_BRACKET = "bracket"

STATUS_PENDING = "pending"
STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"


class Match(SQLModel, table=True):
    __table_args__ = (
        SAUniqueConstraint("event_id", "category_id", "stage", "match_number", name="uq_match_number"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="event.id", index=True)
    category_id: str = Field(index=True)
    round: int  # 1-based; for brackets the highest round is the final
    match_number: int  # Stable ordinal within (event, category, stage)
    stage: str  # "group" | "bracket"
    education_level: Optional[str] = Field(default=None)

    # Team slots (null = to be determined, or a bye)
    team_a_id: Optional[int] = Field(default=None, foreign_key="team.id")
    team_b_id: Optional[int] = Field(default=None, foreign_key="team.id")

    status: str = Field(default=STATUS_PENDING)  # "pending" | "in_progress" | "completed"
    winner_id: Optional[int] = Field(default=None, foreign_key="team.id")

    # Scores are opaque to the bracket engine
    score_a: Optional[int] = Field(default=None)
    score_b: Optional[int] = Field(default=None)
    ko_points_a: Optional[int] = Field(default=None)  # Minisumo
    ko_points_b: Optional[int] = Field(default=None)
    goals_a: Optional[int] = Field(default=None)  # Robofut
    goals_b: Optional[int] = Field(default=None)
    time_a: Optional[float] = Field(default=None)  # RC racing, seconds
    time_b: Optional[float] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    started_at: Optional[datetime] = Field(default=None)
    completed_at: Optional[datetime] = Field(default=None)

    # Relationships
    event: "Event" = Relationship(back_populates="matches")
    team_a: Optional["Team"] = Relationship(sa_relationship_kwargs={"foreign_keys": "Match.team_a_id"})
    team_b: Optional["Team"] = Relationship(sa_relationship_kwargs={"foreign_keys": "Match.team_b_id"})
