import math
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field, validator

from app.models.event import EventStatus
from .common import CamelModel, as_naive_utc
from .payment_schemas import PaymentRead

TIER_ERROR = "All pricing tiers must have a name and price greater than 0"

def _required(value: str, label: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError(f"{label} is required")
    return value

class PricingTierCreate(CamelModel):
    name: str
    description: Optional[str] = None
    price: float

    @validator("name")
    def name_not_blank(cls, v):
        v = v.strip()
        if not v:
            raise ValueError(TIER_ERROR)
        return v

    @validator("description")
    def strip_description(cls, v):
        if v is None:
            return None
        return v.strip() or None

    @validator("price")
    def price_positive(cls, v):
        if not math.isfinite(v) or v <= 0:
            raise ValueError(TIER_ERROR)
        return v

class PricingTierRead(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    price: float

class EventCreate(CamelModel):
    """
    Payload for creating an event together with its pricing tiers.

    Field order matters: each validator only sees the fields declared
    before it, so event_date precedes registration_deadline.
    """
    title: str
    description: Optional[str] = None
    upi_id: str
    qr_code_url: str
    event_date: datetime
    registration_deadline: Optional[datetime] = None
    max_participants: Optional[int] = None
    pricing_tiers: List[PricingTierCreate] = Field(default=[], validate_default=True)

    @validator("title")
    def title_not_blank(cls, v):
        return _required(v, "Title")

    @validator("upi_id")
    def upi_id_not_blank(cls, v):
        return _required(v, "UPI ID")

    @validator("qr_code_url")
    def qr_code_url_not_blank(cls, v):
        return _required(v, "QR code URL")

    @validator("description")
    def strip_description(cls, v):
        if v is None:
            return None
        return v.strip() or None

    @validator("event_date")
    def event_date_in_future(cls, v):
        v = as_naive_utc(v)
        if v <= datetime.utcnow():
            raise ValueError("Event date must be in the future")
        return v

    @validator("registration_deadline")
    def deadline_before_event(cls, v, values):
        if v is None:
            return None
        v = as_naive_utc(v)
        event_date = values.get("event_date")
        if event_date and v >= event_date:
            raise ValueError("Registration deadline must be before event date")
        return v

    @validator("max_participants")
    def max_participants_positive(cls, v):
        if v is not None and v < 1:
            raise ValueError("Max participants must be at least 1")
        return v

    @validator("pricing_tiers")
    def at_least_one_tier(cls, v):
        if not v:
            raise ValueError("At least one pricing tier is required")
        return v

class EventSummary(CamelModel):
    id: int
    title: str
    status: EventStatus

class EventCreateResponse(CamelModel):
    success: bool = True
    message: str
    event: EventSummary

class EventRead(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    organizer_id: int
    upi_id: str
    qr_code_url: str
    event_date: datetime
    registration_deadline: Optional[datetime] = None
    max_participants: Optional[int] = None
    status: EventStatus
    created_at: Optional[datetime] = None
    pricing_tiers: List[PricingTierRead] = []

class EventWithCounts(EventRead):
    participant_count: int = 0
    payment_count: int = 0
    pending_count: int = 0
    verified_count: int = 0

class EventStatusUpdate(CamelModel):
    status: EventStatus

class DashboardStats(CamelModel):
    events_organized: int
    payments_made: int
    pending_payments: int
    verified_payments: int
    recent_events: List[EventSummary] = []

class PaymentTotals(CamelModel):
    counts: Dict[str, int]
    amounts: Dict[str, float]

class EventPaymentsResponse(CamelModel):
    payments: List[PaymentRead]
    totals: PaymentTotals
