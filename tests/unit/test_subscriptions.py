"""
Unit tests for the subscription ledger.
Run: pytest tests/unit/test_subscriptions.py -v
"""
from datetime import date
from decimal import Decimal

import pytest

from app.core.errors import NotFoundError, ValidationError
from app.repositories.subscription_payment_repository import SubscriptionPaymentRepository
from app.repositories.subscription_repository import SubscriptionRepository
from app.schemas.subscription import SubscriptionCreate, SubscriptionUpdate
from app.services.subscription_service import check_usage, SubscriptionService


@pytest.fixture
def ledger_for(db):
    def _service(identity):
        return SubscriptionService(SubscriptionRepository(db), SubscriptionPaymentRepository(db), identity)

    return _service


def _create(service, **overrides):
    data = {"name": "Netflix", "provider": "Netflix Inc", "cost": Decimal("15.99"), "category": "entertainment"}
    data.update(overrides)
    return service.create(SubscriptionCreate(**data))


def test_create_and_get(ledger_for, user_identity):
    service = ledger_for(user_identity)
    sub = _create(service)

    fetched = service.get(sub.id)
    assert fetched.user_id == "user-1"
    assert fetched.cost == Decimal("15.99")
    assert fetched.billing_cycle == "monthly"
    assert fetched.currency == "BDT"


def test_ledger_is_scoped_to_owner(ledger_for, user_identity, other_identity):
    sub = _create(ledger_for(user_identity))
    other = ledger_for(other_identity)

    assert other.list() == []
    with pytest.raises(NotFoundError):
        other.get(sub.id)
    with pytest.raises(NotFoundError):
        other.delete(sub.id)


def test_list_filters(ledger_for, user_identity):
    service = ledger_for(user_identity)
    _create(service, name="Netflix", category="entertainment")
    _create(service, name="Notion", provider="Notion Labs", category="productivity")
    off = _create(service, name="Gym", provider=None, category="health")
    service.set_active(off.id, False)

    assert {s.name for s in service.list(search="NOT")} == {"Notion"}
    assert {s.name for s in service.list(search="netflix inc")} == {"Netflix"}
    assert {s.name for s in service.list(category="productivity")} == {"Notion"}
    assert {s.name for s in service.list(status="inactive")} == {"Gym"}
    assert len(service.list(status="active", category="all")) == 2
    with pytest.raises(ValidationError):
        service.list(status="paused")


def test_usage_cannot_exceed_limit(ledger_for, user_identity):
    service = ledger_for(user_identity)
    with pytest.raises(ValidationError):
        _create(service, usage_limit=Decimal("10"), current_usage=Decimal("11"))

    sub = _create(service, usage_limit=Decimal("10"), current_usage=Decimal("5"))
    assert service.update_usage(sub.id, Decimal("10")).current_usage == Decimal("10")
    with pytest.raises(ValidationError):
        service.update_usage(sub.id, Decimal("10.01"))
    with pytest.raises(ValidationError):
        service.update(sub.id, SubscriptionUpdate(usage_limit=Decimal("9")))


def test_check_usage_without_limit():
    check_usage(None, Decimal("1000"))
    check_usage(Decimal("5"), None)
    with pytest.raises(ValidationError):
        check_usage(None, Decimal("-1"))


def test_update_is_partial(ledger_for, user_identity):
    service = ledger_for(user_identity)
    sub = _create(service, notes="keep me")

    updated = service.update(sub.id, SubscriptionUpdate(cost=Decimal("17.5"), billing_cycle="yearly"))
    assert updated.cost == Decimal("17.50")
    assert updated.billing_cycle == "yearly"
    assert updated.notes == "keep me"

    with pytest.raises(ValidationError):
        service.update(sub.id, SubscriptionUpdate(name=None, cost=None))


def test_record_payment_advances_next_billing_date(ledger_for, user_identity):
    service = ledger_for(user_identity)
    sub = _create(service, billing_cycle="monthly", next_billing_date=date(2024, 1, 31))

    payment = service.record_payment(sub.id, payment_date=date(2024, 1, 31))
    assert payment.amount == Decimal("15.99")
    assert service.get(sub.id).next_billing_date == date(2024, 2, 29)

    service.record_payment(sub.id, amount=Decimal("20"), payment_date=date(2024, 2, 29))
    payments = service.list_payments(sub.id)
    assert [p.payment_date for p in payments] == [date(2024, 2, 29), date(2024, 1, 31)]
    assert service.get(sub.id).next_billing_date == date(2024, 3, 29)


def test_delete_removes_payments(ledger_for, db, user_identity):
    service = ledger_for(user_identity)
    sub = _create(service)
    service.record_payment(sub.id, payment_date=date(2024, 1, 1))

    service.delete(sub.id)
    with pytest.raises(NotFoundError):
        service.get(sub.id)
    assert SubscriptionPaymentRepository(db).list() == []
