import datetime
import enum

from sqlalchemy import Column, DateTime, Enum, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from app.core.database import Base

class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"

class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    pricing_tier_id = Column(Integer, ForeignKey("pricing_tiers.id"), nullable=False)
    amount = Column(Float, nullable=False)
    transaction_id = Column(String, nullable=True)
    upi_reference = Column(String, nullable=True)
    payment_screenshot_url = Column(String, nullable=True)
    status = Column(Enum(PaymentStatus, values_callable=lambda e: [m.value for m in e]), default=PaymentStatus.PENDING, nullable=False)
    verification_notes = Column(Text, nullable=True)
    verified_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    verified_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    event = relationship("Event", back_populates="payments")
    user = relationship("User", back_populates="payments", foreign_keys=[user_id])
    verifier = relationship("User", foreign_keys=[verified_by])
    pricing_tier = relationship("PricingTier")
    participant = relationship("Participant", back_populates="payment", uselist=False, cascade="all, delete-orphan")
