from typing import List

from app.models.user_role import UserRole
from app.repositories.base import BaseRepository


class UserRoleRepository(BaseRepository[UserRole]):
    model = UserRole
    entity_name = "Role"

    def roles_for_user(self, user_id: str) -> List[str]:
        rows = self.db.query(UserRole.role).filter(UserRole.user_id == user_id).all()
        return [row[0] for row in rows]
