from pydantic import BaseModel, EmailStr
from typing import List, Literal, Optional, Union

from app.schemas.cart import CartSummaryResponse
from app.schemas.package import PackageResponse
from app.schemas.purchase import UserSubscriptionResponse
from app.schemas.subscription import MetricsResponse


class IdentityResponse(BaseModel):
    user_id: str
    role: str
    email: Optional[EmailStr] = None


class TokenWithIdentity(BaseModel):
    access_token: str
    token_type: str
    identity: IdentityResponse


class AdminView(BaseModel):
    kind: Literal["admin"] = "admin"
    identity: IdentityResponse
    packages: List[PackageResponse]


class UserView(BaseModel):
    kind: Literal["user"] = "user"
    identity: IdentityResponse
    metrics: MetricsResponse
    cart: CartSummaryResponse
    active_subscription: Optional[UserSubscriptionResponse] = None


# Tagged by the literal ``kind`` field
ViewResponse = Union[AdminView, UserView]
