from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Sequence

from app.core.billing import quantize_money, to_decimal, to_monthly, ZERO
from app.core.config import settings
from app.core.security import Identity
from app.models.subscription import Subscription
from app.repositories.subscription_repository import SubscriptionRepository


@dataclass
class SubscriptionMetrics:
    monthly_total: Decimal
    yearly_estimate: Decimal
    active_count: int
    normalized: bool
    currency: str
    upcoming_payments: List[Subscription] = field(default_factory=list)

    @property
    def next_payment(self) -> Optional[Subscription]:
        return self.upcoming_payments[0] if self.upcoming_payments else None


def compute_metrics(
    subscriptions: Sequence[Subscription],
    normalize: bool = True,
    upcoming_limit: int = 5,
    currency: str = "BDT",
) -> SubscriptionMetrics:
    """
    Derive totals and the upcoming payment list from a ledger snapshot.

    With ``normalize`` each active cost is converted to its monthly equivalent
    (yearly / 12, quarterly / 3, weekly * 4.33, daily * 30). Without it the raw
    cost is summed whatever the cycle.
    """
    active = [sub for sub in subscriptions if sub.is_active]

    total = ZERO
    for sub in active:
        if normalize:
            total += to_monthly(sub.cost, sub.billing_cycle)
        else:
            total += to_decimal(sub.cost)
    monthly_total = quantize_money(total)

    upcoming = sorted(
        (sub for sub in active if sub.next_billing_date is not None),
        key=lambda sub: sub.next_billing_date,
    )[:upcoming_limit]

    return SubscriptionMetrics(
        monthly_total=monthly_total,
        yearly_estimate=monthly_total * 12,
        active_count=len(active),
        normalized=normalize,
        currency=currency,
        upcoming_payments=upcoming,
    )


class MetricsService:
    def __init__(self, repo: SubscriptionRepository, identity: Identity):
        self.repo = repo
        self.identity = identity

    def get_metrics(self) -> SubscriptionMetrics:
        # Recomputed on every read; the ledger is small and changes often
        ledger = self.repo.list_by_user(self.identity.user_id)
        return compute_metrics(
            ledger,
            normalize=settings.NORMALIZE_MONTHLY_TOTAL,
            upcoming_limit=settings.UPCOMING_PAYMENTS_LIMIT,
            currency=settings.DEFAULT_CURRENCY,
        )
