import logging

from fastapi import HTTPException, status

from app.core.config import settings
from app.core.security import Identity, resolve_role
from app.repositories.user_role_repository import UserRoleRepository

logger = logging.getLogger(__name__)


class AuthService:
    """Thin proxy over Supabase Auth; the service itself stores no credentials."""

    def __init__(self, role_repo: UserRoleRepository):
        self.role_repo = role_repo

    def _client(self):
        from supabase import create_client, Client

        if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Authentication provider not configured",
            )
        client: Client = create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
        return client

    def login(self, email: str, password: str) -> dict:
        client = self._client()
        try:
            auth_response = client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as e:
            logger.info(f"Supabase login failed for {email}: {e}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Incorrect email or password",
                headers={"WWW-Authenticate": "Bearer"},
            )

        if not auth_response or not auth_response.session:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Incorrect email or password",
                headers={"WWW-Authenticate": "Bearer"},
            )

        user_id = str(auth_response.user.id)
        identity = Identity(
            user_id=user_id,
            role=resolve_role(self.role_repo.roles_for_user(user_id)),
            email=auth_response.user.email or None,
        )
        logger.info(f"Supabase login succeeded for {email} ({identity.role.value})")
        return {
            "access_token": auth_response.session.access_token,
            "token_type": "bearer",
            "identity": {"user_id": identity.user_id, "role": identity.role.value, "email": identity.email},
        }
