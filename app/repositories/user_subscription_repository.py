from typing import List, Optional

from app.core.billing import UserSubscriptionStatus
from app.models.user_subscription import UserSubscription
from app.repositories.base import BaseRepository


class UserSubscriptionRepository(BaseRepository[UserSubscription]):
    model = UserSubscription
    entity_name = "User subscription"

    def _order_by(self):
        return [UserSubscription.started_at.desc(), UserSubscription.created_at.desc()]

    def list_by_user(self, user_id: str) -> List[UserSubscription]:
        return self.list(user_id=user_id)

    def get_for_user(self, user_subscription_id: str, user_id: str) -> Optional[UserSubscription]:
        return (
            self.db.query(UserSubscription)
            .filter(UserSubscription.user_id == user_id, UserSubscription.id == user_subscription_id)
            .first()
        )

    def get_active_for_user(self, user_id: str) -> Optional[UserSubscription]:
        """Most recently started active record; the UI assumes there is at most one."""
        return (
            self.db.query(UserSubscription)
            .filter(
                UserSubscription.user_id == user_id,
                UserSubscription.status == UserSubscriptionStatus.ACTIVE.value,
            )
            .order_by(*self._order_by())
            .first()
        )

    def list_active_for_user(self, user_id: str) -> List[UserSubscription]:
        """Active records, oldest first. Credits are spent in this order."""
        return (
            self.db.query(UserSubscription)
            .filter(
                UserSubscription.user_id == user_id,
                UserSubscription.status == UserSubscriptionStatus.ACTIVE.value,
            )
            .order_by(UserSubscription.started_at.asc(), UserSubscription.created_at.asc())
            .all()
        )

    def has_active_for_package(self, user_id: str, package_id: str) -> bool:
        return (
            self.db.query(UserSubscription.id)
            .filter(
                UserSubscription.user_id == user_id,
                UserSubscription.package_id == package_id,
                UserSubscription.status == UserSubscriptionStatus.ACTIVE.value,
            )
            .first()
            is not None
        )
