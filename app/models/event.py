import datetime
import enum

from sqlalchemy import CheckConstraint, Column, DateTime, Enum, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from app.core.database import Base

class EventStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    organizer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    upi_id = Column(String, nullable=False)
    qr_code_url = Column(String, nullable=False)
    event_date = Column(DateTime, nullable=False)
    registration_deadline = Column(DateTime, nullable=True)
    max_participants = Column(Integer, nullable=True)
    status = Column(Enum(EventStatus, values_callable=lambda e: [m.value for m in e]), default=EventStatus.ACTIVE, nullable=False)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    organizer = relationship("User", back_populates="organized_events")
    # Deleting an event removes everything hanging off it
    pricing_tiers = relationship("PricingTier", back_populates="event", cascade="all, delete-orphan", order_by="PricingTier.id")
    payments = relationship("Payment", back_populates="event", cascade="all, delete-orphan")
    participants = relationship("Participant", back_populates="event", cascade="all, delete-orphan")

class PricingTier(Base):
    __tablename__ = "pricing_tiers"
    __table_args__ = (
        CheckConstraint("price > 0", name="ck_pricing_tiers_price_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False)

    event = relationship("Event", back_populates="pricing_tiers")
