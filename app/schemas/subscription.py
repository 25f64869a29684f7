from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from app.core.billing import BillingCycle, MAX_MONEY, SubscriptionCategory
from app.schemas.common import Money


class SubscriptionCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    provider: Optional[str] = None
    website_url: Optional[str] = None
    cost: Decimal = Field(..., ge=0, le=MAX_MONEY)
    currency: Optional[str] = None
    billing_cycle: BillingCycle = BillingCycle.MONTHLY
    category: SubscriptionCategory = SubscriptionCategory.OTHER
    is_active: bool = True
    auto_renewal: bool = True
    next_billing_date: Optional[date] = None
    usage_limit: Optional[Decimal] = Field(None, ge=0, le=MAX_MONEY)
    current_usage: Optional[Decimal] = Field(None, ge=0, le=MAX_MONEY)
    notes: Optional[str] = None


class SubscriptionUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    provider: Optional[str] = None
    website_url: Optional[str] = None
    cost: Optional[Decimal] = Field(None, ge=0, le=MAX_MONEY)
    currency: Optional[str] = None
    billing_cycle: Optional[BillingCycle] = None
    category: Optional[SubscriptionCategory] = None
    is_active: Optional[bool] = None
    auto_renewal: Optional[bool] = None
    next_billing_date: Optional[date] = None
    usage_limit: Optional[Decimal] = Field(None, ge=0, le=MAX_MONEY)
    current_usage: Optional[Decimal] = Field(None, ge=0, le=MAX_MONEY)
    notes: Optional[str] = None


class SubscriptionResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    provider: Optional[str] = None
    website_url: Optional[str] = None
    cost: Money
    currency: str
    billing_cycle: str
    category: Optional[str] = None
    is_active: bool
    auto_renewal: Optional[bool] = None
    next_billing_date: Optional[date] = None
    usage_limit: Optional[Money] = None
    current_usage: Optional[Money] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ActiveToggle(BaseModel):
    is_active: bool


class UsageUpdate(BaseModel):
    current_usage: Decimal = Field(..., le=MAX_MONEY)


class PaymentCreate(BaseModel):
    amount: Optional[Decimal] = Field(None, ge=0, le=MAX_MONEY, description="Defaults to the subscription cost")
    payment_date: Optional[date] = Field(None, description="Defaults to today")
    notes: Optional[str] = None


class PaymentResponse(BaseModel):
    id: str
    subscription_id: str
    amount: Money
    currency: Optional[str] = None
    payment_date: date
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UpcomingPayment(BaseModel):
    id: str
    name: str
    cost: Money
    currency: str
    billing_cycle: str
    category: Optional[str] = None
    next_billing_date: date

    class Config:
        from_attributes = True


class MetricsResponse(BaseModel):
    monthly_total: Money
    yearly_estimate: Money
    active_count: int
    currency: str
    normalized: bool
    upcoming_payments: List[UpcomingPayment]
    next_payment: Optional[UpcomingPayment] = None

    class Config:
        from_attributes = True
