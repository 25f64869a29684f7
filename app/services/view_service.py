from sqlalchemy.orm import Session

from app.core.security import Identity
from app.repositories.cart_repository import CartRepository
from app.repositories.package_repository import PackageRepository
from app.repositories.subscription_repository import SubscriptionRepository
from app.repositories.user_subscription_repository import UserSubscriptionRepository
from app.schemas.cart import CartSummaryResponse
from app.schemas.package import PackageResponse
from app.schemas.purchase import UserSubscriptionResponse
from app.schemas.subscription import MetricsResponse
from app.schemas.user import AdminView, IdentityResponse, UserView
from app.services.cart_service import CartService
from app.services.catalog_service import CatalogService
from app.services.metrics_service import MetricsService
from app.services.purchase_service import PurchaseService


def resolve_view(db: Session, identity: Identity) -> AdminView | UserView:
    """
    Decide once, at the service boundary, which dashboard the caller gets.
    Presentation code switches on ``kind`` and never looks at the role.
    """
    who = IdentityResponse(user_id=identity.user_id, role=identity.role.value, email=identity.email)

    if identity.is_admin:
        packages = CatalogService(PackageRepository(db), identity).list(include_inactive=True)
        return AdminView(
            identity=who,
            packages=[PackageResponse.model_validate(p) for p in packages],
        )

    cart_repo = CartRepository(db)
    package_repo = PackageRepository(db)
    user_subscription_repo = UserSubscriptionRepository(db)

    metrics = MetricsService(SubscriptionRepository(db), identity).get_metrics()
    cart = CartService(cart_repo, package_repo, user_subscription_repo, identity).summary()
    active = PurchaseService(cart_repo, package_repo, user_subscription_repo, identity).active_subscription()

    return UserView(
        identity=who,
        metrics=MetricsResponse.model_validate(metrics),
        cart=CartSummaryResponse.model_validate(cart),
        active_subscription=UserSubscriptionResponse(**active) if active else None,
    )
