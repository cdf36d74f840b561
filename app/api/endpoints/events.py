from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.services import auth_service, event_service
from app.models import user as user_model
from app.schemas import event_schemas, participant_schemas
from app.api.dependencies import get_db

router = APIRouter()

@router.post("/create-event", response_model=event_schemas.EventCreateResponse)
async def create_event_endpoint(
    event_in: event_schemas.EventCreate,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    event = event_service.create_event(db=db, event_in=event_in, organizer_id=current_user.id)
    return event_schemas.EventCreateResponse(
        message="Event created successfully",
        event=event_schemas.EventSummary.model_validate(event),
    )

@router.get("/events", response_model=List[event_schemas.EventWithCounts])
async def list_my_events_endpoint(
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return event_service.list_organizer_events(db=db, organizer_id=current_user.id)

@router.get("/events/{event_id}", response_model=event_schemas.EventRead)
async def get_event_endpoint(
    event_id: int,
    db: Session = Depends(get_db),
):
    event = event_service.get_event(db=db, event_id=event_id)
    if not event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return event

@router.patch("/events/{event_id}/status", response_model=event_schemas.EventRead)
async def update_event_status_endpoint(
    event_id: int,
    status_in: event_schemas.EventStatusUpdate,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return event_service.update_event_status(
        db=db, event_id=event_id, new_status=status_in.status, current_user_id=current_user.id
    )

@router.delete("/events/{event_id}", response_model=Dict[str, str])
async def delete_event_endpoint(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    event_service.delete_event(db=db, event_id=event_id, current_user_id=current_user.id)
    return {"message": "Event deleted successfully"}

@router.get("/events/{event_id}/participants", response_model=List[participant_schemas.ParticipantRead])
async def list_participants_endpoint(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return event_service.list_participants(db=db, event_id=event_id, current_user_id=current_user.id)

@router.get("/events/{event_id}/payments", response_model=event_schemas.EventPaymentsResponse)
async def list_payments_endpoint(
    event_id: int,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    payments = event_service.list_payments(db=db, event_id=event_id, current_user_id=current_user.id)
    return event_schemas.EventPaymentsResponse(
        payments=payments,
        totals=event_service.payment_totals(payments),
    )

@router.get("/dashboard", response_model=event_schemas.DashboardStats)
async def dashboard_endpoint(
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return event_service.get_dashboard_stats(db=db, user_id=current_user.id)
