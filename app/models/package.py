from sqlalchemy import Column, String, Boolean, DateTime, Numeric, Text, Index
from sqlalchemy.sql import func
from app.db.base import Base
from app.db.types import FeatureList, new_uuid, utcnow


class SubscriptionPackage(Base):
    __tablename__ = "subscription_packages"

    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="BDT")
    billing_cycle = Column(String(16), nullable=False, default="monthly")  # daily, weekly, monthly, quarterly, yearly
    features = Column(FeatureList, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    __table_args__ = (
        Index("idx_subscription_packages_active", "is_active"),
    )
