"""
Unit tests for the cart: idempotent adds, removal, totals and credits.
Run: pytest tests/unit/test_cart.py -v
"""
from decimal import Decimal
from unittest.mock import patch

import pytest

from app.core.errors import NotFoundError
from app.repositories.cart_repository import CartRepository
from app.repositories.package_repository import PackageRepository
from app.repositories.user_subscription_repository import UserSubscriptionRepository
from app.services.cart_service import ALREADY_IN_CART, ALREADY_SUBSCRIBED, apply_credits, CartService


@pytest.fixture
def cart_for(db):
    def _service(identity):
        return CartService(CartRepository(db), PackageRepository(db), UserSubscriptionRepository(db), identity)

    return _service


def test_add_to_cart_twice_keeps_one_item(cart_for, user_identity, make_package):
    package = make_package()
    cart = cart_for(user_identity)

    line, added, reason = cart.add_to_cart(package.id)
    assert added is True
    assert reason is None
    assert line.package_id == package.id

    again, added, reason = cart.add_to_cart(package.id)
    assert added is False
    assert reason == ALREADY_IN_CART
    assert again.id == line.id
    assert len(cart.list_items()) == 1


def test_concurrent_add_resolves_to_existing_item(cart_for, db, user_identity, make_package):
    package = make_package()
    existing = CartRepository(db).insert({"user_id": user_identity.user_id, "package_id": package.id})
    cart = cart_for(user_identity)

    # First lookup misses, as if the other request inserted right after it
    with patch.object(cart.repo, "get_by_user_and_package", side_effect=[None, existing]):
        line, added, reason = cart.add_to_cart(package.id)

    assert added is False
    assert reason == ALREADY_IN_CART
    assert line.id == existing.id
    assert len(cart.list_items()) == 1


def test_add_to_cart_skips_packages_already_subscribed(cart_for, user_identity, make_package, make_credit_source):
    package = make_package()
    make_credit_source(user_identity.user_id, "0", package=package)

    line, added, reason = cart_for(user_identity).add_to_cart(package.id)
    assert line is None
    assert added is False
    assert reason == ALREADY_SUBSCRIBED


def test_add_unknown_or_inactive_package_raises(cart_for, user_identity, make_package):
    hidden = make_package(name="Legacy", is_active=False)
    cart = cart_for(user_identity)
    with pytest.raises(NotFoundError):
        cart.add_to_cart("missing")
    with pytest.raises(NotFoundError):
        cart.add_to_cart(hidden.id)


def test_carts_are_per_user(cart_for, user_identity, other_identity, make_package):
    package = make_package()
    line, _, _ = cart_for(user_identity).add_to_cart(package.id)

    assert cart_for(other_identity).list_items() == []
    # Another user's item id is treated as absent
    assert cart_for(other_identity).remove_from_cart(line.id) is False
    assert len(cart_for(user_identity).list_items()) == 1


def test_remove_from_cart(cart_for, user_identity, make_package):
    cart = cart_for(user_identity)
    line, _, _ = cart.add_to_cart(make_package().id)

    assert cart.remove_from_cart(line.id) is True
    assert cart.list_items() == []
    assert cart.remove_from_cart(line.id) is False


def test_cart_total_counts_deleted_packages_as_zero(cart_for, db, user_identity, make_package):
    pro = make_package(name="Pro", price="499")
    team = make_package(name="Team", price="1000")
    cart = cart_for(user_identity)
    cart.add_to_cart(pro.id)
    cart.add_to_cart(team.id)
    assert cart.cart_total() == Decimal("1499.00")

    PackageRepository(db).delete(team.id)
    lines = cart.list_items()
    assert len(lines) == 2
    dangling = [line for line in lines if line.package is None]
    assert len(dangling) == 1
    assert dangling[0].price == Decimal("0")
    assert cart.cart_total() == Decimal("499.00")


@pytest.mark.parametrize(
    "total, credits, applied, due",
    [
        ("500", "200", "200.00", "300.00"),
        ("500", "600", "500.00", "0.00"),
        ("500", "0", "0.00", "500.00"),
        ("0", "50", "0.00", "0.00"),
    ],
)
def test_apply_credits(total, credits, applied, due):
    assert apply_credits(Decimal(total), Decimal(credits)) == (Decimal(applied), Decimal(due))


def test_summary_includes_credits(cart_for, user_identity, make_package, make_credit_source):
    make_credit_source(user_identity.user_id, "200")
    cart = cart_for(user_identity)
    cart.add_to_cart(make_package(name="Pro", price="500").id)

    summary = cart.summary()
    assert summary.item_count == 1
    assert summary.subtotal == Decimal("500.00")
    assert summary.credits_available == Decimal("200.00")
    assert summary.credits_applied == Decimal("200.00")
    assert summary.amount_due == Decimal("300.00")
    assert summary.currency == "BDT"
