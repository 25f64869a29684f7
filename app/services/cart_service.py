import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from app.core.billing import quantize_money, to_decimal, ZERO
from app.core.config import settings
from app.core.errors import NotFoundError, ValidationError
from app.core.security import Identity
from app.models.cart_item import CartItem
from app.models.package import SubscriptionPackage
from app.repositories.cart_repository import CartRepository
from app.repositories.package_repository import PackageRepository
from app.repositories.user_subscription_repository import UserSubscriptionRepository

logger = logging.getLogger(__name__)

ALREADY_IN_CART = "already_in_cart"
ALREADY_SUBSCRIBED = "already_subscribed"


@dataclass
class CartLine:
    id: str
    package_id: str
    created_at: Optional[datetime]
    package: Optional[SubscriptionPackage]

    @property
    def price(self) -> Decimal:
        # Dangling reference: the package was deleted after being added
        if self.package is None:
            return ZERO
        return to_decimal(self.package.price)


@dataclass
class CartSummary:
    items: List[CartLine]
    subtotal: Decimal
    credits_available: Decimal
    credits_applied: Decimal
    amount_due: Decimal
    currency: str

    @property
    def item_count(self) -> int:
        return len(self.items)


def apply_credits(total: Decimal, credits: Decimal) -> Tuple[Decimal, Decimal]:
    """Return (credits_applied, amount_due). Credits never push the total below zero."""
    credits = max(to_decimal(credits), ZERO)
    applied = min(credits, total)
    return quantize_money(applied), quantize_money(max(ZERO, total - credits))


class CartService:
    def __init__(
        self,
        repo: CartRepository,
        package_repo: PackageRepository,
        user_subscription_repo: UserSubscriptionRepository,
        identity: Identity,
    ):
        self.repo = repo
        self.package_repo = package_repo
        self.user_subscription_repo = user_subscription_repo
        self.identity = identity

    def list_items(self) -> List[CartLine]:
        items = self.repo.list_by_user(self.identity.user_id)
        packages = self.package_repo.get_many(item.package_id for item in items)
        return [self._line(item, packages.get(item.package_id)) for item in items]

    @staticmethod
    def _line(item: CartItem, package: Optional[SubscriptionPackage]) -> CartLine:
        return CartLine(id=item.id, package_id=item.package_id, created_at=item.created_at, package=package)

    def add_to_cart(self, package_id: str) -> Tuple[Optional[CartLine], bool, Optional[str]]:
        """
        Stage a package for purchase.

        Returns (line, added, reason). A package already in the cart or already
        held as an active subscription is not added again.
        """
        user_id = self.identity.user_id
        package = self.package_repo.get(package_id)
        if package is None or not package.is_active:
            raise NotFoundError("Package not found")

        existing = self.repo.get_by_user_and_package(user_id, package_id)
        if existing is not None:
            logger.info(f"Package {package_id} already in cart of user {user_id}")
            return self._line(existing, package), False, ALREADY_IN_CART

        if self.user_subscription_repo.has_active_for_package(user_id, package_id):
            logger.info(f"User {user_id} already holds an active subscription to package {package_id}")
            return None, False, ALREADY_SUBSCRIBED

        try:
            item = self.repo.insert({"user_id": user_id, "package_id": package_id})
        except ValidationError:
            # A concurrent add won the unique (user, package) constraint
            existing = self.repo.get_by_user_and_package(user_id, package_id)
            if existing is None:
                raise
            logger.info(f"Package {package_id} was added concurrently to cart of user {user_id}")
            return self._line(existing, package), False, ALREADY_IN_CART
        logger.info(f"Package {package_id} added to cart of user {user_id}")
        return self._line(item, package), True, None

    def remove_from_cart(self, cart_item_id: str) -> bool:
        """Remove one of the caller's items. False when there was nothing to remove."""
        item = self.repo.get_for_user(cart_item_id, self.identity.user_id)
        if item is None:
            return False
        self.repo.remove(item)
        logger.info(f"Cart item {cart_item_id} removed for user {self.identity.user_id}")
        return True

    def cart_total(self, lines: Optional[List[CartLine]] = None) -> Decimal:
        if lines is None:
            lines = self.list_items()
        return quantize_money(sum((line.price for line in lines), ZERO))

    def credits_available(self) -> Decimal:
        """Unspent credit held across all of the caller's active purchases."""
        active = self.user_subscription_repo.list_active_for_user(self.identity.user_id)
        return quantize_money(sum((to_decimal(sub.credits_remaining) for sub in active), ZERO))

    def summary(self) -> CartSummary:
        lines = self.list_items()
        subtotal = self.cart_total(lines)
        credits = self.credits_available()
        applied, due = apply_credits(subtotal, credits)
        return CartSummary(
            items=lines,
            subtotal=subtotal,
            credits_available=credits,
            credits_applied=applied,
            amount_due=due,
            currency=settings.DEFAULT_CURRENCY,
        )
