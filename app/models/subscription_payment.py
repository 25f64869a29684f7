from sqlalchemy import Column, String, Date, DateTime, Numeric, Text, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base
from app.db.types import new_uuid, utcnow


class SubscriptionPayment(Base):
    __tablename__ = "subscription_payments"

    id = Column(String(36), primary_key=True, default=new_uuid)
    subscription_id = Column(String(36), ForeignKey("subscriptions.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=True, default="BDT")
    payment_date = Column(Date, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    # Relationships
    subscription = relationship("Subscription", back_populates="payments")
