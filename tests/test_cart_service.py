from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import select, func, update
from sqlalchemy.exc import OperationalError

from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel
from app.domain.schemas import CartItemIn
from tests.conftest import add

LONG_AGO = datetime(2020, 1, 1, tzinfo=timezone.utc)


def test_get_cart_returns_none_without_cart_row(cart_service):
    assert cart_service.get_cart("nobody") is None


def test_existing_empty_cart_has_zero_totals(cart_service):
    cart_service.get_or_create_cart("u1")

    cart = cart_service.get_cart("u1")

    assert cart is not None
    assert cart["items"] == []
    assert cart["subtotal"] == Decimal("0.00")
    assert cart["delivery_fee"] == Decimal("0.00")
    assert cart["total"] == Decimal("0.00")
    assert cart["item_count"] == 0


def test_get_or_create_cart_is_idempotent(cart_service, db_session):
    first = cart_service.get_or_create_cart("u1")
    second = cart_service.get_or_create_cart("u1")

    assert first == second
    assert db_session.execute(select(func.count()).select_from(CartModel)).scalar_one() == 1


def test_adding_same_product_twice_increments_quantity(cart_service, db_session):
    add(cart_service, "u1", "prod-a", "10.00", 2)
    add(cart_service, "u1", "prod-a", "10.00", 3)

    cart = cart_service.get_cart("u1")

    assert len(cart["items"]) == 1
    assert cart["items"][0]["quantity"] == 5
    rows = db_session.execute(select(func.count()).select_from(CartItemModel)).scalar_one()
    assert rows == 1


def test_cart_totals_are_derived_from_items(cart_service):
    add(cart_service, "u1", "prod-a", "10.00", 2)
    add(cart_service, "u1", "prod-b", "15.00", 1)

    cart = cart_service.get_cart("u1")

    assert cart["subtotal"] == Decimal("35.00")
    assert cart["estimated_tax"] == Decimal("3.11")
    assert cart["delivery_fee"] == Decimal("5.00")
    assert cart["total"] == Decimal("43.11")
    assert cart["item_count"] == 3


def test_price_is_snapshot_from_first_add(cart_service):
    add(cart_service, "u1", "prod-a", "10.00", 1)
    add(cart_service, "u1", "prod-a", "12.00", 1)

    item = cart_service.get_cart("u1")["items"][0]

    assert item["product_price"] == Decimal("10.00")
    assert item["quantity"] == 2


CART_MUTATIONS = {
    "add_new": lambda svc: add(svc, "u1", "prod-b", "5.00", 1),
    "add_existing": lambda svc: add(svc, "u1", "prod-a", "10.00", 1),
    "update": lambda svc: svc.update_item_quantity("u1", "prod-a", 4),
    "update_to_zero": lambda svc: svc.update_item_quantity("u1", "prod-a", 0),
    "remove": lambda svc: svc.remove_item("u1", "prod-a"),
    "clear": lambda svc: svc.clear_cart("u1"),
}


@pytest.mark.parametrize("mutation", list(CART_MUTATIONS.values()), ids=list(CART_MUTATIONS))
def test_item_mutations_bump_cart_updated_at(cart_service, db_session, mutation):
    add(cart_service, "u1", "prod-a", "10.00", 2)
    db_session.execute(update(CartModel).where(CartModel.user_id == "u1").values(updated_at=LONG_AGO))
    db_session.commit()
    before = cart_service.get_cart("u1")["updated_at"].replace(tzinfo=None)
    assert before == LONG_AGO.replace(tzinfo=None)

    mutation(cart_service)

    assert cart_service.get_cart("u1")["updated_at"].replace(tzinfo=None) > before


def test_update_retries_only_at_top_level(cart_service, monkeypatch):
    add(cart_service, "u1", "prod-a", "10.00", 2)
    calls = []

    def broken_delete(cart_id, product_id):
        calls.append(product_id)
        raise OperationalError("DELETE FROM cart_items", {}, Exception("connection lost"))

    monkeypatch.setattr(cart_service.repo, "delete_cart_item", broken_delete)

    with pytest.raises(OperationalError):
        cart_service.update_item_quantity("u1", "prod-a", 0)

    assert len(calls) == 3


def test_add_rejects_non_positive_quantity_and_price(cart_service):
    with pytest.raises(ValueError):
        add(cart_service, "u1", "prod-a", "10.00", 0)
    with pytest.raises(ValueError):
        add(cart_service, "u1", "prod-a", "0.00", 1)


def test_update_sets_quantity_instead_of_adding(cart_service):
    add(cart_service, "u1", "prod-a", "10.00", 2)

    cart_service.update_item_quantity("u1", "prod-a", 7)

    assert cart_service.get_cart("u1")["items"][0]["quantity"] == 7


@pytest.mark.parametrize("quantity", [0, -1])
def test_update_to_non_positive_quantity_removes_item(cart_service, quantity):
    add(cart_service, "u1", "prod-a", "10.00", 2)
    add(cart_service, "u1", "prod-b", "15.00", 1)

    cart_service.update_item_quantity("u1", "prod-a", quantity)

    product_ids = [i["product_id"] for i in cart_service.get_cart("u1")["items"]]
    assert product_ids == ["prod-b"]


def test_update_of_missing_item_is_noop(cart_service):
    add(cart_service, "u1", "prod-a", "10.00", 2)

    cart_service.update_item_quantity("u1", "missing", 4)

    assert cart_service.get_item_count("u1") == 2


def test_remove_missing_item_is_not_an_error(cart_service):
    add(cart_service, "u1", "prod-a", "10.00", 1)

    cart_service.remove_item("u1", "missing")
    cart_service.remove_item("u1", "prod-a")

    assert cart_service.get_cart("u1")["items"] == []


def test_clear_cart_keeps_cart_row(cart_service):
    add(cart_service, "u1", "prod-a", "10.00", 1)
    cart_id = cart_service.get_cart("u1")["id"]

    cart_service.clear_cart("u1")

    cart = cart_service.get_cart("u1")
    assert cart["id"] == cart_id
    assert cart["items"] == []


def test_carts_are_isolated_per_user(cart_service):
    add(cart_service, "u1", "prod-a", "10.00", 1)
    add(cart_service, "u2", "prod-a", "10.00", 4)

    assert cart_service.get_item_count("u1") == 1
    assert cart_service.get_item_count("u2") == 4


def _guest(product_id, price, quantity):
    return CartItemIn(
        product_id=product_id,
        product_name=f"Guest {product_id}",
        product_price=Decimal(price),
        quantity=quantity,
    )


def test_merge_combines_quantities(cart_service):
    add(cart_service, "u1", "prod-a", "10.00", 1)

    cart_service.merge_guest_cart("u1", [_guest("prod-a", "10.00", 2), _guest("prod-c", "5.00", 1)])

    items = {i["product_id"]: i["quantity"] for i in cart_service.get_cart("u1")["items"]}
    assert items == {"prod-a": 3, "prod-c": 1}


def test_merge_with_replace_drops_existing_items(cart_service):
    add(cart_service, "u1", "prod-a", "10.00", 1)

    cart_service.merge_guest_cart("u1", [_guest("prod-c", "5.00", 2)], strategy="replace")

    items = {i["product_id"]: i["quantity"] for i in cart_service.get_cart("u1")["items"]}
    assert items == {"prod-c": 2}


def test_merge_rejects_unknown_strategy(cart_service):
    with pytest.raises(ValueError):
        cart_service.merge_guest_cart("u1", [], strategy="union")


def test_validate_empty_and_missing_cart(cart_service):
    assert cart_service.validate_cart("nobody") == {"valid": False, "errors": ["Cart is empty"]}

    cart_service.get_or_create_cart("u1")
    assert cart_service.validate_cart("u1") == {"valid": False, "errors": ["Cart is empty"]}


def test_validate_flags_bad_rows(cart_service, db_session):
    add(cart_service, "u1", "prod-a", "10.00", 1)
    add(cart_service, "u1", "prod-b", "15.00", 1)
    # wiersze z blednymi danymi wstawione z pominieciem serwisu
    item = db_session.execute(
        select(CartItemModel).where(CartItemModel.product_id == "prod-b")
    ).scalar_one()
    item.quantity = 0
    item.product_price = Decimal("0.00")
    db_session.commit()

    result = cart_service.validate_cart("u1")

    assert result["valid"] is False
    assert result["errors"] == ["Invalid quantity for Product prod-b", "Invalid price for Product prod-b"]


def test_validate_valid_cart(cart_service):
    add(cart_service, "u1", "prod-a", "10.00", 1)

    assert cart_service.validate_cart("u1") == {"valid": True, "errors": []}


def test_item_count(cart_service):
    assert cart_service.get_item_count("nobody") == 0

    cart_service.get_or_create_cart("u1")
    assert cart_service.get_item_count("u1") == 0

    add(cart_service, "u1", "prod-a", "10.00", 2)
    add(cart_service, "u1", "prod-b", "15.00", 3)
    assert cart_service.get_item_count("u1") == 5
