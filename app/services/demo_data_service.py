"""
Demo data for organizers trying the verification flow.

Generated users are flagged with ``is_test_user`` so they can be told
apart from real registrations; their payments and participants go
through the same status transition as production rows.
"""
import logging
import random
import string
import time
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.payment import Payment, PaymentStatus
from app.models.user import User, UserRole
from app.schemas import participant_schemas
from app.services import event_service, payment_service

logger = logging.getLogger(__name__)

MAX_DEMO_PARTICIPANTS = 10
VERIFIED_RATIO = 0.7

DEMO_NAMES = [
    "John Doe",
    "Jane Smith",
    "Mike Johnson",
    "Sarah Wilson",
    "David Brown",
    "Emily Davis",
    "Chris Miller",
    "Lisa Garcia",
    "Tom Anderson",
    "Amy Taylor",
]

def _random_code(rng: random.Random, length: int = 6) -> str:
    return "".join(rng.choices(string.ascii_uppercase + string.digits, k=length))

def create_demo_participants(
    db: Session,
    event_id: int,
    count: int,
    current_user: User,
    rng: Optional[random.Random] = None,
) -> List[participant_schemas.DemoParticipantRead]:
    rng = rng or random.Random()
    db_event = event_service.get_event_for_organizer(db, event_id, current_user.id)
    if not db_event.pricing_tiers:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No pricing tiers found for this event")

    created = []
    for i in range(min(count, MAX_DEMO_PARTICIPANTS)):
        tier = rng.choice(db_event.pricing_tiers)
        name = DEMO_NAMES[i] if i < len(DEMO_NAMES) else f"Test User {i + 1}"
        code = _random_code(rng)
        timestamp = int(time.time() * 1000)
        email = f"test{i + 1}.{code.lower()}@example.com"
        payment_status = PaymentStatus.VERIFIED if rng.random() < VERIFIED_RATIO else PaymentStatus.PENDING

        try:
            demo_user = User(name=name, email=email, role=UserRole.USER, is_test_user=True)
            db.add(demo_user)
            db.flush()

            payment = Payment(
                event_id=db_event.id,
                user_id=demo_user.id,
                pricing_tier_id=tier.id,
                amount=tier.price,
                transaction_id=f"TEST_{timestamp}_{code}",
                upi_reference=f"TEST_REF_{timestamp}_{code}",
                status=PaymentStatus.PENDING,
            )
            db.add(payment)
            payment_service.apply_payment_status(
                db, payment, payment_status,
                verifier_id=current_user.id,
                notes=f"Test participant: {name} ({email})",
            )
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Error creating test participant %d for event %s", i + 1, event_id)
            continue

        created.append(participant_schemas.DemoParticipantRead(
            name=name,
            email=email,
            tier=tier.name,
            amount=tier.price,
            status=payment_status,
        ))

    if not created:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create any test participants",
        )

    logger.info("Created %d test participants for event %s", len(created), event_id)
    return created
