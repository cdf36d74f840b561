import math
from datetime import datetime
from typing import Optional

from pydantic import validator

from app.models.payment import PaymentStatus
from app.services import upi
from .common import CamelModel

class PaymentSubmit(CamelModel):
    event_id: int
    pricing_tier_id: int
    amount: float
    transaction_id: Optional[str] = None
    upi_reference: Optional[str] = None
    payment_screenshot_url: Optional[str] = None

    @validator("amount")
    def amount_positive(cls, v):
        if not math.isfinite(v):
            raise ValueError("Amount must be a finite number")
        if v <= 0:
            raise ValueError("Amount must be greater than 0")
        return v

    @validator("transaction_id")
    def transaction_id_format(cls, v):
        if v is None:
            return None
        v = v.strip()
        if not v:
            return None
        if not upi.validate_transaction_id(v):
            raise ValueError("Invalid transaction ID format")
        return v

    @validator("upi_reference", "payment_screenshot_url")
    def blank_to_none(cls, v):
        if v is None:
            return None
        return v.strip() or None

class PaymentVerify(CamelModel):
    payment_id: int
    status: PaymentStatus
    verification_notes: Optional[str] = None

    @validator("status", pre=True)
    def status_is_decision(cls, v):
        if v not in (PaymentStatus.VERIFIED.value, PaymentStatus.REJECTED.value):
            raise ValueError("Status must be either 'verified' or 'rejected'")
        return v

class PaymentRead(CamelModel):
    id: int
    event_id: int
    user_id: int
    pricing_tier_id: int
    amount: float
    transaction_id: Optional[str] = None
    upi_reference: Optional[str] = None
    payment_screenshot_url: Optional[str] = None
    status: PaymentStatus
    verification_notes: Optional[str] = None
    verified_by: Optional[int] = None
    verified_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class PaymentResponse(CamelModel):
    success: bool = True
    message: str
    payment: PaymentRead
