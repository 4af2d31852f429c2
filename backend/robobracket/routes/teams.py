"""
Category team listing.

Registration and invites live elsewhere; this is the minimal registry the
bracket and qualifier generators read their entrants from.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from robobracket.database import get_session
from robobracket.models.event import Event
from robobracket.models.team import Team
from robobracket.services.bracket_builder import order_by_seed

router = APIRouter()


class TeamCreateRequest(BaseModel):
    name: str
    seed: Optional[int] = None
    education_level: Optional[str] = None


class TeamResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_id: int
    category_id: str
    name: str
    seed: Optional[int] = None
    education_level: Optional[str] = None
    created_at: datetime


@router.get("/events/{event_id}/categories/{category_id}/teams", response_model=List[TeamResponse])
def get_teams(event_id: int, category_id: str, session: Session = Depends(get_session)):
    """
    Teams of a category in ranking order: seed ascending (unseeded last), then id.
    """
    event = session.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")

    teams = session.exec(
        select(Team).where(Team.event_id == event_id, Team.category_id == category_id).order_by(Team.id)
    ).all()
    return order_by_seed(teams)


@router.post("/events/{event_id}/categories/{category_id}/teams", response_model=TeamResponse, status_code=201)
def create_team(event_id: int, category_id: str, request: TeamCreateRequest, session: Session = Depends(get_session)):
    event = session.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    if not request.name or not request.name.strip():
        raise HTTPException(status_code=422, detail="name cannot be empty")

    team = Team(
        event_id=event_id,
        category_id=category_id,
        name=request.name.strip(),
        seed=request.seed,
        education_level=request.education_level,
    )
    try:
        session.add(team)
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(
            status_code=409, detail=f"Team with name '{request.name}' already exists in this category"
        )
    session.refresh(team)
    return team
