import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from app.core.billing import add_billing_cycle, quantize_money, to_decimal, UserSubscriptionStatus, ZERO
from app.core.errors import AppError, EmptyCartError, NotFoundError, PartialFailure
from app.core.security import Identity
from app.models.user_subscription import UserSubscription
from app.repositories.cart_repository import CartRepository
from app.repositories.package_repository import PackageRepository
from app.repositories.user_subscription_repository import UserSubscriptionRepository
from app.services.cart_service import apply_credits, CartService

logger = logging.getLogger(__name__)


@dataclass
class PurchaseQuote:
    cart_total: Decimal
    credits_available: Decimal
    credits_applied: Decimal
    amount_due: Decimal


@dataclass
class PurchaseResult:
    subscriptions: List[dict] = field(default_factory=list)
    cart_total: Decimal = ZERO
    credits_applied: Decimal = ZERO
    amount_due: Decimal = ZERO


class PurchaseService:
    """
    Turns the caller's cart into purchased subscriptions.

    Credits are pooled across the caller's active purchases, drawn from the
    oldest record first, and spent on cart items in cart order. The whole
    conversion runs in one transaction: either every item becomes a
    subscription and the cart is cleared, or nothing changes.
    """

    def __init__(
        self,
        cart_repo: CartRepository,
        package_repo: PackageRepository,
        user_subscription_repo: UserSubscriptionRepository,
        identity: Identity,
    ):
        self.cart_repo = cart_repo
        self.package_repo = package_repo
        self.user_subscription_repo = user_subscription_repo
        self.identity = identity
        self.cart = CartService(cart_repo, package_repo, user_subscription_repo, identity)
        self.db = cart_repo.db

    def _serialize(self, subscription: UserSubscription, package_name: Optional[str] = None) -> dict:
        return {
            "id": subscription.id,
            "package_id": subscription.package_id,
            "package_name": package_name,
            "status": subscription.status,
            "started_at": subscription.started_at,
            "expires_at": subscription.expires_at,
            "credits_remaining": quantize_money(subscription.credits_remaining),
            "total_paid": quantize_money(subscription.total_paid),
        }

    def active_subscription(self) -> Optional[dict]:
        active = self.user_subscription_repo.get_active_for_user(self.identity.user_id)
        if active is None:
            return None
        package = self.package_repo.get(active.package_id)
        return self._serialize(active, package.name if package else None)

    def list_history(self) -> List[dict]:
        history = self.user_subscription_repo.list_by_user(self.identity.user_id)
        packages = self.package_repo.get_many(sub.package_id for sub in history)
        return [
            self._serialize(sub, packages[sub.package_id].name if sub.package_id in packages else None)
            for sub in history
        ]

    def quote(self) -> PurchaseQuote:
        total = self.cart.cart_total()
        credits = self.cart.credits_available()
        applied, due = apply_credits(total, credits)
        return PurchaseQuote(cart_total=total, credits_available=credits, credits_applied=applied, amount_due=due)

    def purchase_from_cart(self) -> PurchaseResult:
        user_id = self.identity.user_id
        lines = self.cart.list_items()
        if not lines:
            raise EmptyCartError()

        purchasable = [line for line in lines if line.package is not None]
        if not purchasable:
            # Only dangling references left; nothing can be bought
            raise EmptyCartError("Cart only contains packages that no longer exist")

        cart_total = self.cart.cart_total(purchasable)
        credit_sources = self.user_subscription_repo.list_active_for_user(user_id)
        credits = quantize_money(sum((to_decimal(src.credits_remaining) for src in credit_sources), ZERO))
        credits_applied, amount_due = apply_credits(cart_total, credits)

        now = datetime.now(timezone.utc)
        remaining_credit = credits_applied
        created = []
        step = "create subscriptions"
        try:
            for line in purchasable:
                price = quantize_money(line.price)
                consumed = min(remaining_credit, price)
                remaining_credit -= consumed
                subscription = self.user_subscription_repo.insert(
                    {
                        "user_id": user_id,
                        "package_id": line.package_id,
                        "status": UserSubscriptionStatus.ACTIVE.value,
                        "started_at": now,
                        "expires_at": add_billing_cycle(now, line.package.billing_cycle),
                        "credits_remaining": ZERO,
                        "total_paid": quantize_money(price - consumed),
                    },
                    commit=False,
                )
                created.append((subscription, line.package.name))

            step = "consume credits"
            to_consume = credits_applied
            for source in credit_sources:
                if to_consume <= 0:
                    break
                held = to_decimal(source.credits_remaining)
                taken = min(held, to_consume)
                if taken <= 0:
                    continue
                to_consume -= taken
                self.user_subscription_repo.apply(
                    source, {"credits_remaining": quantize_money(held - taken)}, commit=False
                )

            step = "clear cart"
            for line in lines:
                item = self.cart_repo.get(line.id)
                if item is not None:
                    self.cart_repo.remove(item, commit=False)

            step = "commit"
            self.db.commit()
        except (AppError, SQLAlchemyError) as e:
            self.db.rollback()
            logger.error(f"Purchase for user {user_id} failed at step '{step}': {e}")
            raise PartialFailure(f"Purchase failed while trying to {step}; no changes were saved", step=step)

        # Payment capture of amount_due is handled by the payment provider, not here
        logger.info(
            f"User {user_id} purchased {len(created)} package(s): total={cart_total} "
            f"credits_applied={credits_applied} amount_due={amount_due}"
        )
        return PurchaseResult(
            subscriptions=[self._serialize(sub, name) for sub, name in created],
            cart_total=cart_total,
            credits_applied=credits_applied,
            amount_due=amount_due,
        )

    def cancel_subscription(self, user_subscription_id: str) -> tuple:
        """Mark a purchased subscription cancelled. Returns (record, changed)."""
        subscription = self.user_subscription_repo.get_for_user(user_subscription_id, self.identity.user_id)
        if subscription is None:
            raise NotFoundError("Subscription not found")
        if subscription.status == UserSubscriptionStatus.CANCELLED.value:
            logger.info(f"User subscription {user_subscription_id} was already cancelled")
            return subscription, False
        self.user_subscription_repo.apply(subscription, {"status": UserSubscriptionStatus.CANCELLED.value})
        logger.info(f"User subscription {user_subscription_id} cancelled by user {self.identity.user_id}")
        return subscription, True
