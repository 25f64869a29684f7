from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional

from app.schemas.common import Money
from app.schemas.package import PackageResponse


class CartAddRequest(BaseModel):
    package_id: str


class CartItemResponse(BaseModel):
    id: str
    package_id: str
    created_at: Optional[datetime] = None
    # None when the package was deleted after being added
    package: Optional[PackageResponse] = None

    class Config:
        from_attributes = True


class CartAddResponse(BaseModel):
    added: bool
    reason: Optional[str] = None  # already_in_cart, already_subscribed
    item: Optional[CartItemResponse] = None


class CartSummaryResponse(BaseModel):
    items: List[CartItemResponse]
    item_count: int
    subtotal: Money
    credits_available: Money
    credits_applied: Money
    amount_due: Money
    currency: str

    class Config:
        from_attributes = True
