from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.v1.dependencies import get_current_identity
from app.core.security import Identity
from app.db.session import get_db
from app.repositories.cart_repository import CartRepository
from app.repositories.package_repository import PackageRepository
from app.repositories.user_subscription_repository import UserSubscriptionRepository
from app.schemas.purchase import (
    CancelSubscriptionResponse,
    PurchaseQuoteResponse,
    PurchaseResponse,
    UserSubscriptionResponse,
)
from app.services.purchase_service import PurchaseService

router = APIRouter(tags=["purchases"])


def _service(db: Session, identity: Identity) -> PurchaseService:
    return PurchaseService(CartRepository(db), PackageRepository(db), UserSubscriptionRepository(db), identity)


@router.get("/quote", response_model=PurchaseQuoteResponse)
def get_quote(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    quote = _service(db, identity).quote()
    return PurchaseQuoteResponse.model_validate(quote)


@router.post("", response_model=PurchaseResponse, status_code=status.HTTP_201_CREATED)
def purchase_from_cart(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """
    Convert the cart into purchased subscriptions, applying available credits.

    **Note:** charging ``amount_due`` is up to the payment provider; this
    endpoint only records the purchase.
    """
    result = _service(db, identity).purchase_from_cart()
    return PurchaseResponse(
        subscriptions=[UserSubscriptionResponse(**sub) for sub in result.subscriptions],
        cart_total=result.cart_total,
        credits_applied=result.credits_applied,
        amount_due=result.amount_due,
    )


@router.get("", response_model=List[UserSubscriptionResponse])
def list_purchases(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Purchase history, newest first. Cancelled records are kept."""
    return _service(db, identity).list_history()


@router.post("/{user_subscription_id}/cancel", response_model=CancelSubscriptionResponse)
def cancel_subscription(
    user_subscription_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    subscription, changed = _service(db, identity).cancel_subscription(user_subscription_id)
    return CancelSubscriptionResponse(
        id=subscription.id,
        status=subscription.status,
        changed=changed,
        message="Subscription cancelled" if changed else "Subscription was already cancelled",
    )
