"""
Match runtime: status transitions and score entry.
Completing a bracket match advances its winner (or reports the champion).
"""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlmodel import Session

from robobracket.database import get_session
from robobracket.errors import BracketIntegrityError
from robobracket.models.match import (
    STAGE_BRACKET,
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    STATUS_PENDING,
    Match,
)
from robobracket.routes.draw import MatchResponse
from robobracket.services.bracket_advancer import AdvancementOutcome, advance_winner
from robobracket.services.match_store import MatchStore

logger = logging.getLogger(__name__)

router = APIRouter()

SCORE_FIELDS = ("score_a", "score_b", "ko_points_a", "ko_points_b", "goals_a", "goals_b", "time_a", "time_b")


class MatchResultUpdate(BaseModel):
    status: Optional[str] = None
    winner_id: Optional[int] = None
    score_a: Optional[int] = None
    score_b: Optional[int] = None
    ko_points_a: Optional[int] = None
    ko_points_b: Optional[int] = None
    goals_a: Optional[int] = None
    goals_b: Optional[int] = None
    time_a: Optional[float] = None
    time_b: Optional[float] = None


class AdvancementResponse(BaseModel):
    outcome: str
    target_match_id: Optional[int] = None
    slot: Optional[str] = None
    champion_id: Optional[int] = None
    runner_up_id: Optional[int] = None


class MatchUpdateResponse(BaseModel):
    match: MatchResponse
    advancement: Optional[AdvancementResponse] = None
    advancement_error: Optional[str] = None


def _advancement_response(outcome: AdvancementOutcome) -> AdvancementResponse:
    return AdvancementResponse(
        outcome=outcome.outcome,
        target_match_id=outcome.target_match_id,
        slot=outcome.slot,
        champion_id=outcome.champion_id,
        runner_up_id=outcome.runner_up_id,
    )


def _validate_status_transition(current: str, new: str) -> None:
    if new not in (STATUS_PENDING, STATUS_IN_PROGRESS, STATUS_COMPLETED):
        raise HTTPException(status_code=422, detail=f"Invalid status: {new}")
    if current == STATUS_COMPLETED:
        raise HTTPException(status_code=422, detail="completed is terminal; cannot change status")
    if new == STATUS_PENDING and current != STATUS_PENDING:
        raise HTTPException(status_code=422, detail="Cannot revert to pending")


def _decide_winner(match: Match, winner_id: Optional[int]) -> int:
    """Explicit winner, else the higher score. A tie needs an explicit winner."""
    if match.team_a_id is None or match.team_b_id is None:
        raise HTTPException(status_code=422, detail="Both teams must be known before completing a match")
    if winner_id is not None:
        if winner_id not in (match.team_a_id, match.team_b_id):
            raise HTTPException(status_code=422, detail="winner_id must be one of the match's teams")
        return winner_id
    if match.score_a is None or match.score_b is None:
        raise HTTPException(status_code=422, detail="winner_id or both scores required to complete a match")
    if match.score_a == match.score_b:
        raise HTTPException(status_code=422, detail="Scores are tied; winner_id required")
    return match.team_a_id if match.score_a > match.score_b else match.team_b_id


@router.patch("/matches/{match_id}", response_model=MatchUpdateResponse)
def update_match_result(
    match_id: int,
    payload: MatchResultUpdate,
    session: Session = Depends(get_session),
) -> MatchUpdateResponse:
    """Record scores and/or move a match through pending -> in_progress -> completed."""
    match = session.get(Match, match_id)
    if not match:
        raise HTTPException(status_code=404, detail="Match not found")

    current = match.status or STATUS_PENDING
    updates = payload.model_dump(exclude_unset=True)
    if current == STATUS_COMPLETED:
        if payload.winner_id is not None:
            raise HTTPException(status_code=422, detail="completed is terminal; cannot change winner")
        edited = [name for name in SCORE_FIELDS if name in updates]
        if edited:
            raise HTTPException(
                status_code=422, detail=f"completed is terminal; cannot change {', '.join(edited)}"
            )

    for name in SCORE_FIELDS:
        if name in updates:
            setattr(match, name, updates[name])

    if payload.status is not None:
        _validate_status_transition(current, payload.status)
        if payload.status == STATUS_COMPLETED:
            match.winner_id = _decide_winner(match, payload.winner_id)
            match.status = STATUS_COMPLETED
            match.completed_at = datetime.utcnow()
            if match.started_at is None:
                match.started_at = match.completed_at
        elif payload.status == STATUS_IN_PROGRESS:
            match.status = STATUS_IN_PROGRESS
            if match.started_at is None:
                match.started_at = datetime.utcnow()
    elif payload.winner_id is not None:
        raise HTTPException(status_code=422, detail="winner_id can only be set when completing a match")

    session.add(match)
    session.commit()
    session.refresh(match)

    advancement = None
    advancement_error = None
    if match.status == STATUS_COMPLETED and match.stage == STAGE_BRACKET and payload.status == STATUS_COMPLETED:
        try:
            advancement = _advancement_response(advance_winner(MatchStore(session), match))
        except BracketIntegrityError as e:
            logger.error("Advancement failed for match %s: %s", match_id, e)
            advancement_error = str(e)
        session.refresh(match)

    return MatchUpdateResponse(
        match=MatchResponse.model_validate(match),
        advancement=advancement,
        advancement_error=advancement_error,
    )


@router.post("/matches/{match_id}/advance", response_model=AdvancementResponse)
def advance_match(match_id: int, session: Session = Depends(get_session)) -> AdvancementResponse:
    """Manually run advancement for a completed bracket match (repair/testing). Idempotent."""
    match = session.get(Match, match_id)
    if not match:
        raise HTTPException(status_code=404, detail="Match not found")
    if match.stage != STAGE_BRACKET:
        raise HTTPException(status_code=422, detail="Only bracket matches advance")
    if match.status != STATUS_COMPLETED or match.winner_id is None:
        raise HTTPException(status_code=422, detail="Match must be completed with a winner to run advancement")

    try:
        outcome = advance_winner(MatchStore(session), match)
    except BracketIntegrityError as e:
        logger.error("Advancement failed for match %s: %s", match_id, e)
        raise HTTPException(status_code=409, detail=str(e))
    return _advancement_response(outcome)
