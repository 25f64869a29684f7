# Import all models so create_all / migrations can detect them
from app.models.package import SubscriptionPackage
from app.models.subscription import Subscription
from app.models.subscription_payment import SubscriptionPayment
from app.models.cart_item import CartItem
from app.models.user_subscription import UserSubscription
from app.models.user_role import UserRole

__all__ = [
    "SubscriptionPackage",
    "Subscription",
    "SubscriptionPayment",
    "CartItem",
    "UserSubscription",
    "UserRole",
]
