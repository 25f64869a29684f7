from sqlalchemy import Column, String, Boolean, Date, DateTime, Numeric, Text, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base
from app.db.types import new_uuid, utcnow


class Subscription(Base):
    """A recurring expense tracked by its owner."""

    __tablename__ = "subscriptions"

    id = Column(String(36), primary_key=True, default=new_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    provider = Column(String(255), nullable=True)
    website_url = Column(String(512), nullable=True)
    cost = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="BDT")
    billing_cycle = Column(String(16), nullable=False, default="monthly")
    category = Column(String(32), nullable=True, default="other")
    is_active = Column(Boolean, nullable=False, default=True)
    auto_renewal = Column(Boolean, nullable=True, default=True)
    next_billing_date = Column(Date, nullable=True)
    usage_limit = Column(Numeric(12, 2), nullable=True)
    current_usage = Column(Numeric(12, 2), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    # Relationships
    payments = relationship(
        "SubscriptionPayment",
        back_populates="subscription",
        cascade="all, delete-orphan",
        order_by="SubscriptionPayment.payment_date.desc()",
    )

    __table_args__ = (
        Index("idx_subscriptions_user_active", "user_id", "is_active"),
        Index("idx_subscriptions_user_next_billing", "user_id", "next_billing_date"),
    )
