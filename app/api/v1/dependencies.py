from typing import Optional
import logging
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.core.security import Identity, decode_access_token, resolve_role
from app.db.session import get_db
from app.repositories.user_role_repository import UserRoleRepository

logger = logging.getLogger(__name__)
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Identity:
    """Resolve the caller from a Supabase access token and the user_roles table."""
    if credentials is None:
        raise _unauthorized("Authentication token not provided")
    token = (credentials.credentials or "").strip()
    if token.startswith("Bearer "):
        token = token[7:].strip()
    if not token:
        raise _unauthorized("Invalid or expired token")

    payload = decode_access_token(token)
    if payload is None:
        raise _unauthorized("Invalid or expired token")

    user_id = payload.get("sub")
    if not user_id:
        logger.error(f"Token without 'sub'. Payload keys: {list(payload.keys())}")
        raise _unauthorized("Invalid token")

    roles = UserRoleRepository(db).roles_for_user(str(user_id))
    identity = Identity(user_id=str(user_id), role=resolve_role(roles), email=payload.get("email") or None)
    logger.debug(f"Authenticated user {identity.user_id} as {identity.role.value}")
    return identity


def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    identity.require_admin()
    return identity
