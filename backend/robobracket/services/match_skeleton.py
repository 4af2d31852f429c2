"""Unsaved match records produced by the generators (no id, no timestamps)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from robobracket.models.match import STATUS_PENDING


@dataclass
class MatchSkeleton:
    event_id: int
    category_id: str
    round: int
    match_number: int
    stage: str
    team_a_id: Optional[int] = None
    team_b_id: Optional[int] = None
    status: str = STATUS_PENDING
    winner_id: Optional[int] = None
    score_a: Optional[int] = None
    score_b: Optional[int] = None
    education_level: Optional[str] = None

    @property
    def is_bye(self) -> bool:
        return (self.team_a_id is None) != (self.team_b_id is None)
