from sqlalchemy import Column, String, DateTime, UniqueConstraint
from sqlalchemy.sql import func
from app.db.base import Base
from app.db.types import new_uuid, utcnow


class CartItem(Base):
    __tablename__ = "cart_items"

    id = Column(String(36), primary_key=True, default=new_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    # Weak reference: the package may be deleted while still in a cart
    package_id = Column(String(36), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "package_id", name="uq_cart_items_user_package"),
    )
