from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, field_validator
from sqlmodel import Session

from robobracket.database import get_session
from robobracket.models.event import Event
from robobracket.services.match_store import MatchStore

router = APIRouter()


class EventCreate(BaseModel):
    name: str
    location: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("name cannot be empty")
        return v.strip()


class EventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    location: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: Optional[str] = None
    winners_confirmed: bool
    created_at: datetime


class CategoryResultResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    event_id: int
    category_id: str
    education_level: Optional[str] = None
    champion_team_id: int
    runner_up_team_id: Optional[int] = None
    confirmed_at: datetime

    @field_validator("education_level", mode="before")
    @classmethod
    def blank_level_to_none(cls, v):
        return v or None


@router.post("/events", response_model=EventResponse, status_code=201)
def create_event(event_data: EventCreate, session: Session = Depends(get_session)):
    """Create a new event"""
    if event_data.start_date and event_data.end_date and event_data.end_date < event_data.start_date:
        raise HTTPException(status_code=422, detail="end_date must be on or after start_date")

    event = Event(**event_data.model_dump())
    session.add(event)
    session.commit()
    session.refresh(event)
    return event


@router.get("/events/{event_id}", response_model=EventResponse)
def get_event(event_id: int, session: Session = Depends(get_session)):
    event = session.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@router.get("/events/{event_id}/categories/{category_id}/result", response_model=CategoryResultResponse)
def get_category_result(
    event_id: int,
    category_id: str,
    education_level: Optional[str] = None,
    session: Session = Depends(get_session),
):
    """Champion and runner-up of a category, once its bracket final is completed.

    Split brackets report one result per education level; pass it to select one.
    """
    event = session.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")

    result = MatchStore(session).get_category_result(event_id, category_id, education_level)
    if not result:
        raise HTTPException(status_code=404, detail="Category has no confirmed result yet")
    return result


@router.get("/events/{event_id}/categories/{category_id}/results", response_model=List[CategoryResultResponse])
def list_category_results(event_id: int, category_id: str, session: Session = Depends(get_session)):
    """Every reported result of a category (one per education level when split)."""
    event = session.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return MatchStore(session).load_category_results(event_id, category_id)
