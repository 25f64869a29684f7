from typing import List, Optional

from sqlalchemy import func, or_

from app.models.subscription import Subscription
from app.repositories.base import BaseRepository


class SubscriptionRepository(BaseRepository[Subscription]):
    model = Subscription
    entity_name = "Subscription"

    def _order_by(self):
        return [Subscription.created_at.desc()]

    def get_for_user(self, subscription_id: str, user_id: str) -> Optional[Subscription]:
        """Always filter by owner so one user never sees another user's rows."""
        return (
            self.db.query(Subscription)
            .filter(Subscription.user_id == user_id, Subscription.id == subscription_id)
            .first()
        )

    def list_by_user(
        self,
        user_id: str,
        search: Optional[str] = None,
        category: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> List[Subscription]:
        query = self.db.query(Subscription).filter(Subscription.user_id == user_id)
        if search:
            pattern = f"%{search.strip().lower()}%"
            query = query.filter(
                or_(
                    func.lower(Subscription.name).like(pattern),
                    func.lower(Subscription.provider).like(pattern),
                )
            )
        if category:
            query = query.filter(Subscription.category == category)
        if is_active is not None:
            query = query.filter(Subscription.is_active == is_active)
        return query.order_by(*self._order_by()).all()
