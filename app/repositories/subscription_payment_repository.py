from typing import List

from app.models.subscription_payment import SubscriptionPayment
from app.repositories.base import BaseRepository


class SubscriptionPaymentRepository(BaseRepository[SubscriptionPayment]):
    model = SubscriptionPayment
    entity_name = "Payment"

    def list_for_subscription(self, subscription_id: str, user_id: str) -> List[SubscriptionPayment]:
        return (
            self.db.query(SubscriptionPayment)
            .filter(
                SubscriptionPayment.user_id == user_id,
                SubscriptionPayment.subscription_id == subscription_id,
            )
            .order_by(SubscriptionPayment.payment_date.desc(), SubscriptionPayment.created_at.desc())
            .all()
        )
