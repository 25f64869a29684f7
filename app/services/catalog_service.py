import logging
from typing import Any, Dict, List

from app.core.billing import BillingCycle, MAX_MONEY, format_features, parse_features, parse_price
from app.core.cache import cache_delete_prefix, cache_get_or_set
from app.core.config import settings
from app.core.errors import ValidationError
from app.core.security import Identity
from app.models.package import SubscriptionPackage
from app.repositories.package_repository import PackageRepository

logger = logging.getLogger(__name__)

CATALOG_CACHE_PREFIX = "packages:"
ACTIVE_CATALOG_KEY = f"{CATALOG_CACHE_PREFIX}active"


def validate_package_form(form, partial: bool = False) -> Dict[str, Any]:
    """
    Turn an admin form into storable fields, before any storage call.

    name and price are required on create and update alike; the other fields
    are optional (defaults on create, unchanged on update).
    """
    name = (form.name or "").strip()
    if not name:
        raise ValidationError("Package name is required", field="name")

    price = parse_price(form.price)
    if price is None:
        raise ValidationError("Price must be a number", field="price")
    if price < 0:
        raise ValidationError("Price cannot be negative", field="price")
    if price > MAX_MONEY:
        raise ValidationError(f"Price cannot exceed {MAX_MONEY}", field="price")

    fields: Dict[str, Any] = {"name": name, "price": price}

    if form.billing_cycle is not None or not partial:
        cycle = form.billing_cycle or BillingCycle.MONTHLY.value
        try:
            fields["billing_cycle"] = BillingCycle(cycle).value
        except ValueError:
            raise ValidationError(f"Unknown billing cycle: {cycle}", field="billing_cycle")

    if form.description is not None or not partial:
        fields["description"] = form.description or ""
    if form.features is not None or not partial:
        fields["features"] = parse_features(form.features)
    if form.is_active is not None or not partial:
        fields["is_active"] = True if form.is_active is None else form.is_active
    if form.currency is not None or not partial:
        fields["currency"] = (form.currency or settings.DEFAULT_CURRENCY).upper()
    return fields


class CatalogService:
    """Package catalog: admin CRUD plus the cached public storefront list."""

    @staticmethod
    def _serialize(package: SubscriptionPackage) -> dict:
        return {
            "id": package.id,
            "name": package.name,
            "description": package.description,
            "price": str(package.price),
            "currency": package.currency,
            "billing_cycle": package.billing_cycle,
            "features": list(package.features or []),
            "is_active": package.is_active,
        }

    def __init__(self, repo: PackageRepository, identity: Identity):
        self.repo = repo
        self.identity = identity

    def list_active(self) -> List[dict]:
        return cache_get_or_set(
            ACTIVE_CATALOG_KEY,
            lambda: [self._serialize(p) for p in self.repo.list_active()],
        )

    def list(self, include_inactive: bool = True) -> List[SubscriptionPackage]:
        self.identity.require_admin()
        if include_inactive:
            return self.repo.list()
        return self.repo.list_active()

    def create(self, form) -> SubscriptionPackage:
        self.identity.require_admin()
        fields = validate_package_form(form)
        package = self.repo.insert(fields)
        cache_delete_prefix(CATALOG_CACHE_PREFIX)
        logger.info(f"Package {package.id} ({package.name}) created by admin {self.identity.user_id}")
        return package

    def update(self, package_id: str, form) -> SubscriptionPackage:
        self.identity.require_admin()
        fields = validate_package_form(form, partial=True)
        package = self.repo.update(package_id, fields)
        cache_delete_prefix(CATALOG_CACHE_PREFIX)
        logger.info(f"Package {package_id} updated by admin {self.identity.user_id}")
        return package

    def delete(self, package_id: str) -> None:
        self.identity.require_admin()
        self.repo.delete(package_id)
        cache_delete_prefix(CATALOG_CACHE_PREFIX)
        logger.info(f"Package {package_id} deleted by admin {self.identity.user_id}")

    def edit_form(self, package_id: str) -> dict:
        """Current values for the edit dialog, features joined one per line."""
        self.identity.require_admin()
        package = self.repo.get_or_raise(package_id)
        return {
            "id": package.id,
            "name": package.name,
            "description": package.description or "",
            "price": str(package.price),
            "currency": package.currency,
            "billing_cycle": package.billing_cycle,
            "features": format_features(package.features),
            "is_active": package.is_active,
        }
