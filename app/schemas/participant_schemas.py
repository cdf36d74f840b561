from datetime import datetime
from typing import List, Optional

from pydantic import validator

from app.models.participant import ParticipantStatus
from app.models.payment import PaymentStatus
from .common import CamelModel
from .user_schemas import UserSummary

class ParticipantPayment(CamelModel):
    amount: float
    status: PaymentStatus
    created_at: Optional[datetime] = None

class ParticipantRead(CamelModel):
    id: int
    event_id: int
    user_id: int
    payment_id: int
    status: ParticipantStatus
    created_at: Optional[datetime] = None
    user: UserSummary
    payment: ParticipantPayment

class DemoParticipantsRequest(CamelModel):
    event_id: int
    count: int = 5

    @validator("count")
    def count_positive(cls, v):
        if v < 1:
            raise ValueError("Count must be at least 1")
        return v

class DemoParticipantRead(CamelModel):
    name: str
    email: str
    tier: str
    amount: float
    status: PaymentStatus

class DemoParticipantsResponse(CamelModel):
    success: bool = True
    message: str
    participants: List[DemoParticipantRead]
