"""
Billing cycle and money helpers shared by the ledger, the catalog and the
purchase flow.
"""
import calendar
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Any, Iterable, List, Optional, TypeVar

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
# Largest value a Numeric(12, 2) column holds
MAX_MONEY = Decimal("9999999999.99")

DateT = TypeVar("DateT", date, datetime)


class BillingCycle(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class SubscriptionCategory(str, Enum):
    ENTERTAINMENT = "entertainment"
    PRODUCTIVITY = "productivity"
    BUSINESS = "business"
    EDUCATION = "education"
    HEALTH = "health"
    FINANCE = "finance"
    OTHER = "other"


class UserSubscriptionStatus(str, Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class AppRole(str, Enum):
    ADMIN = "admin"
    USER = "user"
    PREMIUM = "premium"


# Multipliers to a monthly equivalent
MONTHLY_FACTORS = {
    BillingCycle.DAILY: Decimal("30"),
    BillingCycle.WEEKLY: Decimal("4.33"),
    BillingCycle.MONTHLY: Decimal("1"),
    BillingCycle.QUARTERLY: Decimal("1") / Decimal("3"),
    BillingCycle.YEARLY: Decimal("1") / Decimal("12"),
}

# Calendar step for one period: (days, months)
CYCLE_STEPS = {
    BillingCycle.DAILY: (1, 0),
    BillingCycle.WEEKLY: (7, 0),
    BillingCycle.MONTHLY: (0, 1),
    BillingCycle.QUARTERLY: (0, 3),
    BillingCycle.YEARLY: (0, 12),
}


def quantize_money(value: Any) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_decimal(value: Any) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def parse_price(raw: Any) -> Optional[Decimal]:
    """Parse a form price ("499", "499.5", 499.0). None when unparseable."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return None
    try:
        value = to_decimal(raw)
    except (InvalidOperation, ValueError, TypeError):
        return None
    if not value.is_finite():
        return None
    try:
        return quantize_money(value)
    except InvalidOperation:
        # Too many digits to carry cents; callers reject it as out of range
        return value


def to_monthly(amount: Any, cycle: BillingCycle | str) -> Decimal:
    return to_decimal(amount) * MONTHLY_FACTORS[BillingCycle(cycle)]


def _add_months(value: DateT, months: int) -> DateT:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    # Clamp to the last day of the target month (Jan 31 + 1 month -> Feb 28/29)
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def add_billing_cycle(value: DateT, cycle: BillingCycle | str, periods: int = 1) -> DateT:
    """Advance a date (or datetime) by whole billing periods."""
    days, months = CYCLE_STEPS[BillingCycle(cycle)]
    if months:
        return _add_months(value, months * periods)
    return value + timedelta(days=days * periods)


def parse_features(raw: Any) -> List[str]:
    """
    Normalize a features value into an ordered list of strings.

    Text blocks are split on newlines and blank lines are dropped; lists keep
    their order with blank entries dropped. Entries are not trimmed so a
    join/split round trip gives back the same list.
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        items: Iterable[Any] = [line.rstrip("\r") for line in raw.split("\n")]
    elif isinstance(raw, (list, tuple)):
        items = raw
    else:
        items = [raw]
    features = []
    for item in items:
        if item is None:
            continue
        text = str(item)
        if text.strip():
            features.append(text)
    return features


def format_features(features: Any) -> str:
    """Inverse of parse_features, used to populate the edit form."""
    return "\n".join(parse_features(features))
