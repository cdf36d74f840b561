"""
Heuristics around self-reported UPI payments.

None of these checks prove a payment happened; they only catch obvious
typos and reuse so the organizer's manual review has less noise.
"""
import re
import time
from typing import Optional

from sqlalchemy.orm import Session

from app.models.payment import Payment

TRANSACTION_ID_PATTERNS = [
    re.compile(r"^\d{12}$", re.ASCII),                # 12-digit numeric
    re.compile(r"^[A-Za-z0-9]{14,18}$", re.ASCII),    # 14-18 character alphanumeric
    re.compile(r"^UPI[A-Za-z0-9]{10,15}$", re.ASCII), # UPI prefix
    re.compile(r"^TEST_\d+_[A-Z0-9]{6}$", re.ASCII),  # synthetic ids from the demo generator
]

def validate_transaction_id(transaction_id: str) -> bool:
    return any(pattern.fullmatch(transaction_id) for pattern in TRANSACTION_ID_PATTERNS)

def generate_payment_reference(event_id, user_id, now_ms: Optional[int] = None) -> str:
    """
    Build a short payment reference from the event, the user and the clock.

    The result is not guaranteed to be unique: two submissions by the same
    user for the same event within the same millisecond window collide.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    timestamp = str(now_ms)[-6:]
    return f"{str(event_id)[:4]}{str(user_id)[:4]}{timestamp}"

def is_duplicate_screenshot(db: Session, image_url: str, event_id: int) -> bool:
    return db.query(Payment.id).filter(
        Payment.event_id == event_id,
        Payment.payment_screenshot_url == image_url,
    ).first() is not None
