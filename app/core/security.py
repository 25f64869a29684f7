import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from app.core.billing import AppRole
from app.core.config import settings
from app.core.errors import AuthorizationError

logger = logging.getLogger(__name__)

# Highest privilege wins when a user holds several roles
ROLE_PRECEDENCE = (AppRole.ADMIN, AppRole.PREMIUM, AppRole.USER)


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, as seen by the services."""

    user_id: str
    role: AppRole = AppRole.USER
    email: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == AppRole.ADMIN

    def require_admin(self) -> None:
        if not self.is_admin:
            logger.warning(f"User {self.user_id} ({self.role.value}) attempted an admin operation")
            raise AuthorizationError("Admin role required")


def resolve_role(roles) -> AppRole:
    known = {role.value for role in AppRole}
    held = {AppRole(r) for r in roles if r in known}
    for role in ROLE_PRECEDENCE:
        if role in held:
            return role
    return AppRole.USER


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT shaped like a Supabase access token (used by scripts and tests)."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRATION_HOURS)

    to_encode.update({"exp": expire})
    to_encode.setdefault("aud", settings.JWT_AUDIENCE)
    to_encode.setdefault("role", "authenticated")
    return jwt.encode(
        to_encode,
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_access_token(token: str) -> Optional[dict]:
    """Decode and verify a Supabase JWT. None when invalid or expired."""
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
        )
        return payload
    except JWTError as e:
        logger.warning(f"JWT rejected: {e}")
        return None
