import datetime
import logging
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.event import Event, EventStatus, PricingTier
from app.models.participant import Participant, ParticipantStatus
from app.models.payment import Payment, PaymentStatus
from app.models.user import User
from app.schemas import payment_schemas
from app.services import upi

logger = logging.getLogger(__name__)

# A participant's status is always derived from its payment's status
PARTICIPANT_STATUS_FOR_PAYMENT = {
    PaymentStatus.PENDING: ParticipantStatus.REGISTERED,
    PaymentStatus.VERIFIED: ParticipantStatus.CONFIRMED,
    PaymentStatus.REJECTED: ParticipantStatus.CANCELLED,
}

def participant_status_for(payment_status: PaymentStatus) -> ParticipantStatus:
    return PARTICIPANT_STATUS_FOR_PAYMENT[payment_status]

def apply_payment_status(
    db: Session,
    payment: Payment,
    new_status: PaymentStatus,
    verifier_id: Optional[int] = None,
    notes: Optional[str] = None,
) -> Participant:
    """
    Move a payment to ``new_status`` and bring its participant along.

    This is the only place payment and participant statuses change. The
    participant row is created when missing and updated otherwise, so a
    payment never ends up with two registrations. Nothing is committed
    here; callers commit both rows together.
    """
    now = datetime.datetime.utcnow()
    payment.status = new_status
    payment.updated_at = now
    if notes is not None:
        payment.verification_notes = notes
    if new_status != PaymentStatus.PENDING:
        payment.verified_by = verifier_id
        payment.verified_at = now

    target = participant_status_for(new_status)
    participant = payment.participant
    if participant is None:
        participant = Participant(
            event_id=payment.event_id,
            user_id=payment.user_id,
            status=target,
        )
        payment.participant = participant
        db.add(participant)
    else:
        participant.status = target
    return participant

def _count_active_participants(db: Session, event_id: int) -> int:
    return db.query(Participant).filter(
        Participant.event_id == event_id,
        Participant.status != ParticipantStatus.CANCELLED,
    ).count()

def submit_payment(db: Session, payment_in: payment_schemas.PaymentSubmit, current_user: User) -> Payment:
    event = db.query(Event).filter(Event.id == payment_in.event_id).first()
    if not event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    if event.status != EventStatus.ACTIVE:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Event is not accepting registrations")

    tier = db.query(PricingTier).filter(
        PricingTier.id == payment_in.pricing_tier_id,
        PricingTier.event_id == event.id,
    ).first()
    if not tier:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Pricing tier does not belong to this event")
    if abs(payment_in.amount - tier.price) > 0.005:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Amount does not match the selected pricing tier")

    if event.registration_deadline and datetime.datetime.utcnow() > event.registration_deadline:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Registration deadline has passed")
    if event.max_participants and _count_active_participants(db, event.id) >= event.max_participants:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Event is full")

    if payment_in.payment_screenshot_url and upi.is_duplicate_screenshot(db, payment_in.payment_screenshot_url, event.id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="This payment screenshot has already been submitted for this event",
        )

    reference = payment_in.upi_reference or upi.generate_payment_reference(event.id, current_user.id)

    db_payment = Payment(
        event_id=event.id,
        user_id=current_user.id,
        pricing_tier_id=tier.id,
        amount=payment_in.amount,
        transaction_id=payment_in.transaction_id,
        upi_reference=reference,
        payment_screenshot_url=payment_in.payment_screenshot_url,
        status=PaymentStatus.PENDING,
    )
    try:
        db.add(db_payment)
        apply_payment_status(db, db_payment, PaymentStatus.PENDING)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error creating payment for event %s", event.id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to submit payment")

    db.refresh(db_payment)
    logger.info("Payment %s submitted by user %s for event %s", db_payment.id, current_user.id, event.id)
    return db_payment

def verify_payment(db: Session, verify_in: payment_schemas.PaymentVerify, current_user: User) -> Payment:
    payment = db.query(Payment).filter(Payment.id == verify_in.payment_id).first()
    if not payment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment not found")

    event = db.query(Event).filter(Event.id == payment.event_id).first()
    if not event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    if event.organizer_id != current_user.id:
        logger.warning("User %s attempted to verify payment %s of event %s", current_user.id, payment.id, event.id)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to verify this payment")

    previous = payment.status
    try:
        apply_payment_status(
            db, payment, verify_in.status,
            verifier_id=current_user.id,
            notes=verify_in.verification_notes,
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error updating payment %s", payment.id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update payment status")

    db.refresh(payment)
    logger.info("Payment %s moved from %s to %s by user %s",
                payment.id, previous.value, payment.status.value, current_user.id)
    return payment

def list_user_payments(db: Session, user_id: int) -> List[Payment]:
    return db.query(Payment).filter(Payment.user_id == user_id).order_by(Payment.created_at.desc(), Payment.id.desc()).all()
