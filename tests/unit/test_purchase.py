"""
Unit tests for the purchase reconciler: cart to subscriptions, credits,
rollback, cancellation.
Run: pytest tests/unit/test_purchase.py -v
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from app.core.errors import EmptyCartError, NotFoundError, PartialFailure
from app.repositories.cart_repository import CartRepository
from app.repositories.package_repository import PackageRepository
from app.repositories.user_subscription_repository import UserSubscriptionRepository
from app.services.purchase_service import PurchaseService


@pytest.fixture
def purchases_for(db):
    def _service(identity):
        return PurchaseService(CartRepository(db), PackageRepository(db), UserSubscriptionRepository(db), identity)

    return _service


def _fill_cart(db, user_id, *packages):
    """Cart items with explicit, increasing timestamps so cart order is fixed."""
    repo = CartRepository(db)
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    for offset, package in enumerate(packages):
        repo.insert({"user_id": user_id, "package_id": package.id, "created_at": start + timedelta(minutes=offset)})


def test_purchase_creates_subscriptions_and_clears_cart(db, purchases_for, user_identity, make_package):
    pro = make_package(name="Pro", price="499")
    _fill_cart(db, user_identity.user_id, pro)

    result = purchases_for(user_identity).purchase_from_cart()

    assert result.cart_total == Decimal("499.00")
    assert result.credits_applied == Decimal("0.00")
    assert result.amount_due == Decimal("499.00")
    assert len(result.subscriptions) == 1
    sub = result.subscriptions[0]
    assert sub["package_name"] == "Pro"
    assert sub["status"] == "active"
    assert sub["total_paid"] == Decimal("499.00")
    assert sub["credits_remaining"] == Decimal("0.00")
    assert sub["expires_at"] is not None
    assert CartRepository(db).list_by_user(user_identity.user_id) == []


def test_purchase_with_partial_credit(db, purchases_for, user_identity, make_package, make_credit_source):
    source = make_credit_source(user_identity.user_id, "200")
    _fill_cart(db, user_identity.user_id, make_package(name="Pro", price="500"))

    result = purchases_for(user_identity).purchase_from_cart()

    assert result.credits_applied == Decimal("200.00")
    assert result.amount_due == Decimal("300.00")
    assert result.subscriptions[0]["total_paid"] == Decimal("300.00")
    db.refresh(source)
    assert source.credits_remaining == Decimal("0.00")


def test_purchase_with_credit_covering_everything(db, purchases_for, user_identity, make_package, make_credit_source):
    source = make_credit_source(user_identity.user_id, "600")
    _fill_cart(db, user_identity.user_id, make_package(name="Pro", price="500"))

    result = purchases_for(user_identity).purchase_from_cart()

    assert result.credits_applied == Decimal("500.00")
    assert result.amount_due == Decimal("0.00")
    db.refresh(source)
    assert source.credits_remaining == Decimal("100.00")


def test_leftover_credit_stays_spendable(db, purchases_for, user_identity, make_package, make_credit_source):
    make_credit_source(user_identity.user_id, "600")
    _fill_cart(db, user_identity.user_id, make_package(name="Pro", price="500"))
    service = purchases_for(user_identity)
    service.purchase_from_cart()

    assert service.quote().credits_available == Decimal("100.00")
    assert service.cart.summary().credits_available == Decimal("100.00")

    _fill_cart(db, user_identity.user_id, make_package(name="Addon", price="80"))
    result = service.purchase_from_cart()
    assert result.credits_applied == Decimal("80.00")
    assert result.amount_due == Decimal("0.00")
    assert service.quote().credits_available == Decimal("20.00")


def test_credits_drawn_from_oldest_purchase_first(db, purchases_for, user_identity, make_package):
    repo = UserSubscriptionRepository(db)
    older = repo.insert(
        {
            "user_id": user_identity.user_id,
            "package_id": make_package(name="Old", price="10").id,
            "started_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
            "credits_remaining": Decimal("50"),
        }
    )
    newer = repo.insert(
        {
            "user_id": user_identity.user_id,
            "package_id": make_package(name="New", price="10").id,
            "started_at": datetime(2024, 6, 1, tzinfo=timezone.utc),
            "credits_remaining": Decimal("100"),
        }
    )
    _fill_cart(db, user_identity.user_id, make_package(name="Pro", price="120"))

    result = purchases_for(user_identity).purchase_from_cart()

    assert result.credits_applied == Decimal("120.00")
    db.refresh(older)
    db.refresh(newer)
    assert older.credits_remaining == Decimal("0.00")
    assert newer.credits_remaining == Decimal("30.00")


def test_credits_consumed_in_cart_order(db, purchases_for, user_identity, make_package, make_credit_source):
    make_credit_source(user_identity.user_id, "150")
    first = make_package(name="First", price="100")
    second = make_package(name="Second", price="100")
    _fill_cart(db, user_identity.user_id, first, second)

    result = purchases_for(user_identity).purchase_from_cart()

    paid = {sub["package_name"]: sub["total_paid"] for sub in result.subscriptions}
    assert paid == {"First": Decimal("0.00"), "Second": Decimal("50.00")}
    assert result.amount_due == Decimal("50.00")


def test_purchase_empty_cart_raises(purchases_for, user_identity):
    with pytest.raises(EmptyCartError):
        purchases_for(user_identity).purchase_from_cart()


def test_purchase_with_only_deleted_packages_raises(db, purchases_for, user_identity, make_package):
    gone = make_package(name="Gone")
    _fill_cart(db, user_identity.user_id, gone)
    PackageRepository(db).delete(gone.id)

    with pytest.raises(EmptyCartError):
        purchases_for(user_identity).purchase_from_cart()


def test_purchase_skips_deleted_packages(db, purchases_for, user_identity, make_package):
    gone = make_package(name="Gone", price="1000")
    pro = make_package(name="Pro", price="499")
    _fill_cart(db, user_identity.user_id, gone, pro)
    PackageRepository(db).delete(gone.id)

    result = purchases_for(user_identity).purchase_from_cart()

    assert [sub["package_name"] for sub in result.subscriptions] == ["Pro"]
    assert result.cart_total == Decimal("499.00")
    assert CartRepository(db).list_by_user(user_identity.user_id) == []


def test_failed_purchase_rolls_everything_back(db, purchases_for, user_identity, make_package, make_credit_source):
    source = make_credit_source(user_identity.user_id, "200")
    _fill_cart(db, user_identity.user_id, make_package(name="Pro", price="500"))
    service = purchases_for(user_identity)

    with patch.object(service.cart_repo, "remove", side_effect=OperationalError("DELETE", {}, Exception("disk I/O"))):
        with pytest.raises(PartialFailure) as exc:
            service.purchase_from_cart()

    assert exc.value.step == "clear cart"
    assert exc.value.rolled_back is True
    # Nothing was persisted: cart intact, credits untouched, no new subscriptions
    assert len(CartRepository(db).list_by_user(user_identity.user_id)) == 1
    db.refresh(source)
    assert source.credits_remaining == Decimal("200.00")
    assert UserSubscriptionRepository(db).list_by_user(user_identity.user_id) == [source]


def test_quote_matches_purchase(db, purchases_for, user_identity, make_package, make_credit_source):
    make_credit_source(user_identity.user_id, "200")
    _fill_cart(db, user_identity.user_id, make_package(name="Pro", price="500"))

    quote = purchases_for(user_identity).quote()

    assert quote.cart_total == Decimal("500.00")
    assert quote.credits_available == Decimal("200.00")
    assert quote.credits_applied == Decimal("200.00")
    assert quote.amount_due == Decimal("300.00")


def test_cancel_is_idempotent(db, purchases_for, user_identity, make_package):
    _fill_cart(db, user_identity.user_id, make_package())
    service = purchases_for(user_identity)
    sub_id = service.purchase_from_cart().subscriptions[0]["id"]

    record, changed = service.cancel_subscription(sub_id)
    assert changed is True
    assert record.status == "cancelled"

    record, changed = service.cancel_subscription(sub_id)
    assert changed is False
    assert record.status == "cancelled"
    # Cancelled records stay in the history
    assert [h["status"] for h in service.list_history()] == ["cancelled"]
    assert service.active_subscription() is None


def test_cancel_someone_elses_subscription(db, purchases_for, user_identity, other_identity, make_package):
    _fill_cart(db, user_identity.user_id, make_package())
    sub_id = purchases_for(user_identity).purchase_from_cart().subscriptions[0]["id"]

    with pytest.raises(NotFoundError):
        purchases_for(other_identity).cancel_subscription(sub_id)
