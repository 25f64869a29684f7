from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.v1.dependencies import get_current_identity
from app.core.security import Identity
from app.db.session import get_db
from app.repositories.subscription_payment_repository import SubscriptionPaymentRepository
from app.repositories.subscription_repository import SubscriptionRepository
from app.schemas.subscription import (
    ActiveToggle,
    MetricsResponse,
    PaymentCreate,
    PaymentResponse,
    SubscriptionCreate,
    SubscriptionResponse,
    SubscriptionUpdate,
    UsageUpdate,
)
from app.services.metrics_service import MetricsService
from app.services.subscription_service import SubscriptionService

router = APIRouter(tags=["subscriptions"])


def _service(db: Session, identity: Identity) -> SubscriptionService:
    return SubscriptionService(SubscriptionRepository(db), SubscriptionPaymentRepository(db), identity)


@router.get("/metrics", response_model=MetricsResponse)
def get_metrics(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Monthly total, yearly estimate and the next upcoming payments."""
    metrics = MetricsService(SubscriptionRepository(db), identity).get_metrics()
    return MetricsResponse.model_validate(metrics)


@router.get("", response_model=List[SubscriptionResponse])
def list_subscriptions(
    search: Optional[str] = Query(None, description="Matches name or provider"),
    category: Optional[str] = Query(None),
    status_filter: str = Query("all", alias="status", description="all, active or inactive"),
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return _service(db, identity).list(search=search, category=category, status=status_filter)


@router.post("", response_model=SubscriptionResponse, status_code=status.HTTP_201_CREATED)
def create_subscription(
    payload: SubscriptionCreate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return _service(db, identity).create(payload)


@router.get("/{subscription_id}", response_model=SubscriptionResponse)
def get_subscription(
    subscription_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return _service(db, identity).get(subscription_id)


@router.patch("/{subscription_id}", response_model=SubscriptionResponse)
def update_subscription(
    subscription_id: str,
    payload: SubscriptionUpdate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return _service(db, identity).update(subscription_id, payload)


@router.patch("/{subscription_id}/active", response_model=SubscriptionResponse)
def toggle_subscription(
    subscription_id: str,
    payload: ActiveToggle,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return _service(db, identity).set_active(subscription_id, payload.is_active)


@router.patch("/{subscription_id}/usage", response_model=SubscriptionResponse)
def update_usage(
    subscription_id: str,
    payload: UsageUpdate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return _service(db, identity).update_usage(subscription_id, payload.current_usage)


@router.delete("/{subscription_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_subscription(
    subscription_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    _service(db, identity).delete(subscription_id)
    return None


@router.get("/{subscription_id}/payments", response_model=List[PaymentResponse])
def list_payments(
    subscription_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return _service(db, identity).list_payments(subscription_id)


@router.post("/{subscription_id}/payments", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
def record_payment(
    subscription_id: str,
    payload: PaymentCreate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Record a payment; next_billing_date moves one billing cycle past the payment date."""
    return _service(db, identity).record_payment(
        subscription_id, payload.amount, payload.payment_date, payload.notes
    )
