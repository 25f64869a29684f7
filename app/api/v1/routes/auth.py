from fastapi import APIRouter, Depends, Form
from sqlalchemy.orm import Session

from app.api.v1.dependencies import get_current_identity
from app.core.security import Identity
from app.db.session import get_db
from app.repositories.user_role_repository import UserRoleRepository
from app.schemas.user import IdentityResponse, TokenWithIdentity, ViewResponse
from app.services.auth_service import AuthService
from app.services.view_service import resolve_view

router = APIRouter(tags=["auth"])


@router.post("/login", response_model=TokenWithIdentity)
def login(
    email: str = Form(...),
    password: str = Form(...),
    db: Session = Depends(get_db),
):
    return AuthService(UserRoleRepository(db)).login(email, password)


@router.get("/me", response_model=IdentityResponse)
def get_me(identity: Identity = Depends(get_current_identity)):
    return IdentityResponse(user_id=identity.user_id, role=identity.role.value, email=identity.email)


@router.get("/me/view", response_model=ViewResponse)
def get_my_view(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Admin dashboard (catalog) or user dashboard (metrics, cart, plan), tagged by ``kind``."""
    return resolve_view(db, identity)
