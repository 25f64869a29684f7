"""
Grant (or revoke) an application role for a Supabase user.
Usage: python -m scripts.grant_role <user_id> [admin|premium|user] [--revoke]
"""
import logging
import sys

from app.core.billing import AppRole
from app.core.logging import configure_logging
from app.db.session import SessionLocal
from app.repositories.user_role_repository import UserRoleRepository

logger = logging.getLogger(__name__)


def grant_role(user_id: str, role: str, revoke: bool = False) -> bool:
    role_value = AppRole(role).value
    db = SessionLocal()
    try:
        repo = UserRoleRepository(db)
        existing = repo.list(user_id=user_id, role=role_value)
        if revoke:
            for row in existing:
                repo.remove(row)
            logger.info(f"Role {role_value} revoked from {user_id} ({len(existing)} row(s))")
            return bool(existing)
        if existing:
            logger.info(f"User {user_id} already has role {role_value}")
            return False
        repo.insert({"user_id": user_id, "role": role_value})
        logger.info(f"Role {role_value} granted to {user_id}")
        return True
    finally:
        db.close()


if __name__ == "__main__":
    configure_logging()
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    if not args:
        print("Usage: python -m scripts.grant_role <user_id> [admin|premium|user] [--revoke]")
        sys.exit(1)
    try:
        grant_role(args[0], args[1] if len(args) > 1 else AppRole.ADMIN.value, revoke="--revoke" in sys.argv)
    except ValueError:
        print(f"Unknown role: {args[1]}")
        sys.exit(1)
