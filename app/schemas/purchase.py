from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional

from app.schemas.common import Money


class UserSubscriptionResponse(BaseModel):
    id: str
    package_id: str
    package_name: Optional[str] = None
    status: str
    started_at: datetime
    expires_at: Optional[datetime] = None
    credits_remaining: Money
    total_paid: Money


class PurchaseQuoteResponse(BaseModel):
    cart_total: Money
    credits_available: Money
    credits_applied: Money
    amount_due: Money

    class Config:
        from_attributes = True


class PurchaseResponse(BaseModel):
    subscriptions: List[UserSubscriptionResponse]
    cart_total: Money
    credits_applied: Money
    amount_due: Money


class CancelSubscriptionResponse(BaseModel):
    id: str
    status: str
    changed: bool
    message: str
