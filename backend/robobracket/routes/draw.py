"""
Draw generation: qualifier rounds and elimination brackets for a category.
"""
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field
from sqlmodel import Session

from robobracket.database import get_session
from robobracket.errors import InputError
from robobracket.models.event import Event
from robobracket.services.bracket_advancer import resolve_pending_advancements
from robobracket.services.generation_service import (
    AlreadyGeneratedError,
    generate_bracket,
    generate_qualifiers,
)
from robobracket.services.match_store import MatchStore

logger = logging.getLogger(__name__)

router = APIRouter()


class MatchResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_id: int
    category_id: str
    round: int
    match_number: int
    stage: str
    education_level: Optional[str] = None
    team_a_id: Optional[int] = None
    team_b_id: Optional[int] = None
    status: str
    winner_id: Optional[int] = None
    score_a: Optional[int] = None
    score_b: Optional[int] = None
    ko_points_a: Optional[int] = None
    ko_points_b: Optional[int] = None
    goals_a: Optional[int] = None
    goals_b: Optional[int] = None
    time_a: Optional[float] = None
    time_b: Optional[float] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class ByeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    round: int
    team_id: int
    education_level: Optional[str] = None


class BracketRequest(BaseModel):
    team_ids: Optional[List[int]] = None  # Ranked, best first; defaults to seed order
    size: Optional[int] = None
    split_by_education: bool = False
    replace: bool = False


class BracketResponse(BaseModel):
    matches: List[MatchResponse]
    byes_advanced: int
    skipped_levels: List[str] = []
    advancement_errors: List[dict] = []


class QualifiersRequest(BaseModel):
    rounds: Optional[int] = Field(default=None, ge=1)
    strategy: Optional[str] = None  # "rotating" | "circle"
    seed: Optional[int] = None  # Reproducible shuffle
    split_by_education: bool = False
    replace: bool = False


class QualifiersResponse(BaseModel):
    matches: List[MatchResponse]
    byes: List[ByeResponse]
    skipped_levels: List[str] = []


class ResolveAdvancementsResponse(BaseModel):
    matches_processed: int
    teams_advanced: int
    champions_reported: int
    errors: List[dict] = []
    halted: bool = False


class AdvancementHoldResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    event_id: int
    category_id: str
    match_id: Optional[int] = None
    detail: str
    created_at: datetime


def _require_event(session: Session, event_id: int) -> Event:
    event = session.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@router.post("/events/{event_id}/categories/{category_id}/bracket", response_model=BracketResponse, status_code=201)
def create_bracket(
    event_id: int,
    category_id: str,
    request: BracketRequest,
    session: Session = Depends(get_session),
) -> BracketResponse:
    """Generate the single-elimination bracket. Byes are resolved and advanced immediately."""
    _require_event(session, event_id)
    try:
        result = generate_bracket(
            session,
            event_id,
            category_id,
            team_ids=request.team_ids,
            size=request.size,
            split_by_education=request.split_by_education,
            replace=request.replace,
        )
    except AlreadyGeneratedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except InputError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return BracketResponse(
        matches=[MatchResponse.model_validate(m) for m in result.matches],
        byes_advanced=len(result.advancements),
        skipped_levels=result.skipped_levels,
        advancement_errors=result.errors,
    )


@router.post(
    "/events/{event_id}/categories/{category_id}/qualifiers", response_model=QualifiersResponse, status_code=201
)
def create_qualifiers(
    event_id: int,
    category_id: str,
    request: QualifiersRequest,
    session: Session = Depends(get_session),
) -> QualifiersResponse:
    """Generate group-stage qualifier rounds."""
    _require_event(session, event_id)
    try:
        result = generate_qualifiers(
            session,
            event_id,
            category_id,
            rounds=request.rounds,
            strategy_name=request.strategy,
            seed=request.seed,
            split_by_education=request.split_by_education,
            replace=request.replace,
        )
    except AlreadyGeneratedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except InputError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return QualifiersResponse(
        matches=[MatchResponse.model_validate(m) for m in result.matches],
        byes=[ByeResponse.model_validate(b) for b in result.byes],
        skipped_levels=result.skipped_levels,
    )


@router.get("/events/{event_id}/categories/{category_id}/matches", response_model=List[MatchResponse])
def get_matches(
    event_id: int,
    category_id: str,
    stage: Optional[str] = Query(default=None, pattern="^(group|bracket)$"),
    session: Session = Depends(get_session),
):
    """List matches of a category. Stable order: stage, match_number."""
    _require_event(session, event_id)
    return MatchStore(session).load_matches(event_id, category_id, stage=stage)


@router.get("/events/{event_id}/categories/{category_id}/byes", response_model=List[ByeResponse])
def get_byes(event_id: int, category_id: str, session: Session = Depends(get_session)):
    """Qualifier byes (teams sitting out a round)."""
    _require_event(session, event_id)
    return MatchStore(session).load_byes(event_id, category_id)


@router.post(
    "/events/{event_id}/categories/{category_id}/resolve-advancements",
    response_model=ResolveAdvancementsResponse,
)
def resolve_advancements(event_id: int, category_id: str, session: Session = Depends(get_session)):
    """
    Re-run advancement for every completed bracket match (repair after imports or
    interrupted runs). Idempotent. The first integrity error stops the pass and
    puts the category on hold.
    """
    _require_event(session, event_id)
    summary = resolve_pending_advancements(MatchStore(session), event_id, category_id)
    if summary.errors:
        logger.error(
            "Bracket for event=%s category=%s needs attention: %s",
            event_id,
            category_id,
            summary.errors[0]["detail"],
        )
    return ResolveAdvancementsResponse(
        matches_processed=summary.matches_processed,
        teams_advanced=summary.teams_advanced,
        champions_reported=summary.champions_reported,
        errors=summary.errors,
        halted=summary.halted,
    )


@router.get(
    "/events/{event_id}/categories/{category_id}/advancement-hold",
    response_model=AdvancementHoldResponse,
)
def get_advancement_hold(event_id: int, category_id: str, session: Session = Depends(get_session)):
    """The integrity error that stopped automatic advancement in this category."""
    _require_event(session, event_id)
    hold = MatchStore(session).get_advancement_hold(event_id, category_id)
    if hold is None:
        raise HTTPException(status_code=404, detail="No advancement hold for this category")
    return hold


@router.delete("/events/{event_id}/categories/{category_id}/advancement-hold")
def clear_advancement_hold(event_id: int, category_id: str, session: Session = Depends(get_session)):
    """Resume automatic advancement once the bracket has been repaired."""
    _require_event(session, event_id)
    if not MatchStore(session).clear_advancement_hold(event_id, category_id):
        raise HTTPException(status_code=404, detail="No advancement hold for this category")
    return {"message": "Advancement hold cleared"}
