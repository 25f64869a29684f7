from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.api.v1.dependencies import get_current_identity
from app.core.security import Identity
from app.db.session import get_db
from app.repositories.cart_repository import CartRepository
from app.repositories.package_repository import PackageRepository
from app.repositories.user_subscription_repository import UserSubscriptionRepository
from app.schemas.cart import CartAddRequest, CartAddResponse, CartItemResponse, CartSummaryResponse
from app.services.cart_service import CartService

router = APIRouter(tags=["cart"])


def _service(db: Session, identity: Identity) -> CartService:
    return CartService(CartRepository(db), PackageRepository(db), UserSubscriptionRepository(db), identity)


@router.get("", response_model=CartSummaryResponse)
def get_cart(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Cart items with subtotal, credits and the amount due at checkout."""
    return CartSummaryResponse.model_validate(_service(db, identity).summary())


@router.post("/items", response_model=CartAddResponse, status_code=status.HTTP_201_CREATED)
def add_to_cart(
    payload: CartAddRequest,
    response: Response,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    line, added, reason = _service(db, identity).add_to_cart(payload.package_id)
    if not added:
        # Nothing was inserted; the reason tells the client why
        response.status_code = status.HTTP_200_OK
    return CartAddResponse(
        added=added,
        reason=reason,
        item=CartItemResponse.model_validate(line) if line else None,
    )


@router.delete("/items/{cart_item_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_from_cart(
    cart_item_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    _service(db, identity).remove_from_cart(cart_item_id)
    return None
