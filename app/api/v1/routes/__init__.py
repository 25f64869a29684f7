from fastapi import APIRouter

from app.api.v1.routes import admin_packages, auth, cart, packages, purchases, subscription

router = APIRouter()
router.include_router(auth.router, prefix="/auth")
router.include_router(subscription.router, prefix="/subscriptions")
router.include_router(packages.router, prefix="/packages")
router.include_router(cart.router, prefix="/cart")
router.include_router(purchases.router, prefix="/purchases")
router.include_router(admin_packages.router, prefix="/admin/packages")
