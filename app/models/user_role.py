from sqlalchemy import Column, String, UniqueConstraint
from app.db.base import Base
from app.db.types import new_uuid


class UserRole(Base):
    __tablename__ = "user_roles"

    id = Column(String(36), primary_key=True, default=new_uuid)
    user_id = Column(String(36), nullable=False, index=True)
    role = Column(String(16), nullable=False, default="user")  # admin, user, premium

    __table_args__ = (
        UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),
    )
