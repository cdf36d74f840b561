import logging
from collections import defaultdict
from typing import Dict, List, Optional

from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.models.event import Event, EventStatus, PricingTier
from app.models.participant import Participant
from app.models.payment import Payment, PaymentStatus
from app.schemas import event_schemas

logger = logging.getLogger(__name__)

def _db_error_detail(e: SQLAlchemyError) -> str:
    return str(getattr(e, "orig", None) or e)

def create_event(db: Session, event_in: event_schemas.EventCreate, organizer_id: int) -> Event:
    db_event = Event(
        title=event_in.title,
        description=event_in.description,
        organizer_id=organizer_id,
        upi_id=event_in.upi_id,
        qr_code_url=event_in.qr_code_url,
        event_date=event_in.event_date,
        registration_deadline=event_in.registration_deadline,
        max_participants=event_in.max_participants,
        status=EventStatus.ACTIVE,
    )
    try:
        db.add(db_event)
        db.flush() # assigns db_event.id
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error creating event")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create event: {_db_error_detail(e)}",
        )

    try:
        db.add_all([
            PricingTier(
                event_id=db_event.id,
                name=tier.name,
                description=tier.description,
                price=float(tier.price),
            )
            for tier in event_in.pricing_tiers
        ])
        db.flush()
        db.commit()
    except SQLAlchemyError as e:
        # The event row goes away with the failed tiers
        db.rollback()
        logger.exception("Error creating pricing tiers")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create pricing tiers: {_db_error_detail(e)}",
        )

    db.refresh(db_event)
    logger.info("Event %s created by user %s with %d pricing tiers",
                db_event.id, organizer_id, len(event_in.pricing_tiers))
    return db_event

def get_event(db: Session, event_id: int) -> Optional[Event]:
    return db.query(Event).options(joinedload(Event.pricing_tiers)).filter(Event.id == event_id).first()

def get_event_for_organizer(db: Session, event_id: int, current_user_id: int) -> Event:
    db_event = get_event(db, event_id)
    if not db_event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    if db_event.organizer_id != current_user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to manage this event")
    return db_event

def list_organizer_events(db: Session, organizer_id: int) -> List[event_schemas.EventWithCounts]:
    events = db.query(Event).options(joinedload(Event.pricing_tiers)).filter(
        Event.organizer_id == organizer_id
    ).order_by(Event.created_at.desc(), Event.id.desc()).all()
    if not events:
        return []

    event_ids = [e.id for e in events]
    participant_counts = dict(
        db.query(Participant.event_id, func.count(Participant.id))
        .filter(Participant.event_id.in_(event_ids))
        .group_by(Participant.event_id)
        .all()
    )
    payment_counts: Dict[int, Dict[PaymentStatus, int]] = defaultdict(dict)
    for event_id, payment_status, count in (
        db.query(Payment.event_id, Payment.status, func.count(Payment.id))
        .filter(Payment.event_id.in_(event_ids))
        .group_by(Payment.event_id, Payment.status)
        .all()
    ):
        payment_counts[event_id][payment_status] = count

    result = []
    for db_event in events:
        by_status = payment_counts.get(db_event.id, {})
        result.append(event_schemas.EventWithCounts(
            **event_schemas.EventRead.model_validate(db_event).model_dump(),
            participant_count=participant_counts.get(db_event.id, 0),
            payment_count=sum(by_status.values()),
            pending_count=by_status.get(PaymentStatus.PENDING, 0),
            verified_count=by_status.get(PaymentStatus.VERIFIED, 0),
        ))
    return result

def update_event_status(db: Session, event_id: int, new_status: EventStatus, current_user_id: int) -> Event:
    db_event = get_event_for_organizer(db, event_id, current_user_id)
    db_event.status = new_status
    db.commit()
    db.refresh(db_event)
    logger.info("Event %s status set to %s", event_id, new_status.value)
    return db_event

def delete_event(db: Session, event_id: int, current_user_id: int) -> bool:
    db_event = get_event_for_organizer(db, event_id, current_user_id)
    try:
        db.delete(db_event) # cascades to tiers, payments and participants
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error deleting event %s", event_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to delete event: {_db_error_detail(e)}",
        )
    logger.info("Event %s deleted by user %s", event_id, current_user_id)
    return True

def list_participants(db: Session, event_id: int, current_user_id: int) -> List[Participant]:
    get_event_for_organizer(db, event_id, current_user_id)
    return db.query(Participant).options(
        joinedload(Participant.user), joinedload(Participant.payment)
    ).filter(Participant.event_id == event_id).order_by(Participant.id.desc()).all()

def list_payments(db: Session, event_id: int, current_user_id: int) -> List[Payment]:
    get_event_for_organizer(db, event_id, current_user_id)
    return db.query(Payment).filter(Payment.event_id == event_id).order_by(Payment.created_at.desc(), Payment.id.desc()).all()

def payment_totals(payments: List[Payment]) -> event_schemas.PaymentTotals:
    counts = {s.value: 0 for s in PaymentStatus}
    amounts = {s.value: 0.0 for s in PaymentStatus}
    for payment in payments:
        counts[payment.status.value] += 1
        amounts[payment.status.value] += payment.amount
    return event_schemas.PaymentTotals(counts=counts, amounts=amounts)

def get_dashboard_stats(db: Session, user_id: int) -> event_schemas.DashboardStats:
    organized_ids = select(Event.id).where(Event.organizer_id == user_id)

    events_organized = db.query(Event).filter(Event.organizer_id == user_id).count()
    payments_made = db.query(Payment).filter(Payment.user_id == user_id).count()
    pending_payments = db.query(Payment).filter(
        Payment.event_id.in_(organized_ids), Payment.status == PaymentStatus.PENDING
    ).count()
    verified_payments = db.query(Payment).filter(
        Payment.event_id.in_(organized_ids), Payment.status == PaymentStatus.VERIFIED
    ).count()
    recent_events = db.query(Event).filter(Event.organizer_id == user_id).order_by(
        Event.created_at.desc(), Event.id.desc()
    ).limit(5).all()

    return event_schemas.DashboardStats(
        events_organized=events_organized,
        payments_made=payments_made,
        pending_payments=pending_payments,
        verified_payments=verified_payments,
        recent_events=[event_schemas.EventSummary.model_validate(e) for e in recent_events],
    )
