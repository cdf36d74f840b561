from app.core.database import Base

# Import all models here to ensure they are registered with Base
from .user import User, UserRole
from .event import Event, EventStatus, PricingTier
from .payment import Payment, PaymentStatus
from .participant import Participant, ParticipantStatus
