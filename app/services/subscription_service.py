import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from app.core.billing import add_billing_cycle, quantize_money
from app.core.config import settings
from app.core.errors import NotFoundError, ValidationError
from app.core.security import Identity
from app.models.subscription import Subscription
from app.models.subscription_payment import SubscriptionPayment
from app.repositories.subscription_payment_repository import SubscriptionPaymentRepository
from app.repositories.subscription_repository import SubscriptionRepository

logger = logging.getLogger(__name__)

STATUS_FILTERS = {"all": None, "active": True, "inactive": False}


def check_usage(usage_limit: Optional[Decimal], current_usage: Optional[Decimal]) -> None:
    if current_usage is not None and current_usage < 0:
        raise ValidationError("Current usage cannot be negative", field="current_usage")
    if usage_limit is not None and current_usage is not None and current_usage > usage_limit:
        raise ValidationError(
            f"Current usage {current_usage} exceeds the usage limit {usage_limit}",
            field="current_usage",
        )


class SubscriptionService:
    """The caller's ledger of self-tracked subscriptions."""

    def __init__(
        self,
        repo: SubscriptionRepository,
        payment_repo: SubscriptionPaymentRepository,
        identity: Identity,
    ):
        self.repo = repo
        self.payment_repo = payment_repo
        self.identity = identity

    def _get_owned(self, subscription_id: str) -> Subscription:
        subscription = self.repo.get_for_user(subscription_id, self.identity.user_id)
        if subscription is None:
            raise NotFoundError("Subscription not found")
        return subscription

    def list(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        status: str = "all",
    ) -> List[Subscription]:
        if status not in STATUS_FILTERS:
            raise ValidationError(f"Unknown status filter: {status}", field="status")
        if category == "all":
            category = None
        return self.repo.list_by_user(
            self.identity.user_id,
            search=search,
            category=category,
            is_active=STATUS_FILTERS[status],
        )

    def get(self, subscription_id: str) -> Subscription:
        return self._get_owned(subscription_id)

    def create(self, payload) -> Subscription:
        check_usage(payload.usage_limit, payload.current_usage)
        fields = payload.model_dump()
        fields["billing_cycle"] = payload.billing_cycle.value
        fields["category"] = payload.category.value
        fields["currency"] = payload.currency or settings.DEFAULT_CURRENCY
        fields["cost"] = quantize_money(payload.cost)
        fields["user_id"] = self.identity.user_id
        subscription = self.repo.insert(fields)
        logger.info(f"Subscription {subscription.id} created for user {self.identity.user_id}")
        return subscription

    def update(self, subscription_id: str, payload) -> Subscription:
        subscription = self._get_owned(subscription_id)
        changes = payload.model_dump(exclude_unset=True)
        if "billing_cycle" in changes and changes["billing_cycle"] is not None:
            changes["billing_cycle"] = payload.billing_cycle.value
        if "category" in changes and changes["category"] is not None:
            changes["category"] = payload.category.value
        if changes.get("cost") is not None:
            changes["cost"] = quantize_money(changes["cost"])
        for required in ("name", "cost", "billing_cycle", "is_active"):
            if required in changes and changes[required] is None:
                raise ValidationError(f"{required} cannot be empty", field=required)

        check_usage(
            changes.get("usage_limit", subscription.usage_limit),
            changes.get("current_usage", subscription.current_usage),
        )
        return self.repo.apply(subscription, changes)

    def set_active(self, subscription_id: str, is_active: bool) -> Subscription:
        subscription = self._get_owned(subscription_id)
        logger.info(f"Subscription {subscription_id} is_active -> {is_active}")
        return self.repo.apply(subscription, {"is_active": is_active})

    def update_usage(self, subscription_id: str, current_usage: Decimal) -> Subscription:
        subscription = self._get_owned(subscription_id)
        check_usage(subscription.usage_limit, current_usage)
        return self.repo.apply(subscription, {"current_usage": current_usage})

    def delete(self, subscription_id: str) -> None:
        subscription = self._get_owned(subscription_id)
        self.repo.remove(subscription)
        logger.info(f"Subscription {subscription_id} deleted by user {self.identity.user_id}")

    def record_payment(
        self,
        subscription_id: str,
        amount: Optional[Decimal] = None,
        payment_date: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> SubscriptionPayment:
        """Store a payment and move next_billing_date one cycle past it."""
        subscription = self._get_owned(subscription_id)
        paid_on = payment_date or date.today()
        payment = self.payment_repo.insert(
            {
                "subscription_id": subscription.id,
                "user_id": self.identity.user_id,
                "amount": quantize_money(amount if amount is not None else subscription.cost),
                "currency": subscription.currency,
                "payment_date": paid_on,
                "notes": notes,
            },
            commit=False,
        )
        subscription.next_billing_date = add_billing_cycle(paid_on, subscription.billing_cycle)
        self.repo.apply(subscription, {})
        logger.info(
            f"Payment {payment.id} recorded for subscription {subscription.id}; "
            f"next billing on {subscription.next_billing_date}"
        )
        return payment

    def list_payments(self, subscription_id: str) -> List[SubscriptionPayment]:
        self._get_owned(subscription_id)
        return self.payment_repo.list_for_subscription(subscription_id, self.identity.user_id)
