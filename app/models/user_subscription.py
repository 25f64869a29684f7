from sqlalchemy import Column, String, DateTime, Numeric, Index
from sqlalchemy.sql import func
from app.db.base import Base
from app.db.types import new_uuid, utcnow


class UserSubscription(Base):
    """A purchased package. Never deleted; cancelled rows stay as history."""

    __tablename__ = "user_subscriptions"

    id = Column(String(36), primary_key=True, default=new_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    package_id = Column(String(36), nullable=False, index=True)
    status = Column(String(16), nullable=False, default="active")  # active, cancelled, expired
    started_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    credits_remaining = Column(Numeric(12, 2), nullable=False, default=0)
    total_paid = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    __table_args__ = (
        Index("idx_user_subscriptions_user_status", "user_id", "status"),
    )
