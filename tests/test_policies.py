from decimal import Decimal

import pytest

from storefront.errors import ValidationError
from storefront.models.item import status_for_stock
from storefront.services.coercion import MAX_INT, clamped_stock, strict_price
from storefront.services.orders import OrderDraft, generate_tracking_code, order_total


@pytest.mark.parametrize(
    "raw, expected",
    [(19.999, Decimal("20.00")), ("3.333", Decimal("3.33")), (5, Decimal("5.00")), ("0.005", Decimal("0.01"))],
)
def test_price_is_rounded_to_cents(raw, expected):
    assert strict_price(raw) == expected


@pytest.mark.parametrize("raw", ["abc", None, "", True, "nan", "inf"])
def test_non_numeric_price_is_an_error(raw):
    with pytest.raises(ValidationError):
        strict_price(raw)


@pytest.mark.parametrize("raw", [1e30, "1e40", "-1e12", "100000000"])
def test_price_beyond_the_column_range_is_an_error(raw):
    with pytest.raises(ValidationError, match="Price is out of range"):
        strict_price(raw)


def test_largest_storable_price_is_accepted():
    assert strict_price("99999999.99") == Decimal("99999999.99")


@pytest.mark.parametrize(
    "raw, expected",
    [(4, 4), ("7", 7), ("-1", 0), ("lots", 0), (None, 0), (2.9, 2), ("1e30", MAX_INT), ("1e999999", MAX_INT)],
)
def test_stock_is_clamped_not_rejected(raw, expected):
    assert clamped_stock(raw) == expected


def test_status_follows_stock():
    assert status_for_stock(0) == "pre-order"
    assert status_for_stock(1) == "in-stock"


def test_tracking_code_shape():
    for _ in range(50):
        code = generate_tracking_code()
        assert len(code) == 11
        assert code.startswith("POA")
        assert all(c.isdigit() or ("A" <= c <= "Z") for c in code[3:])


def test_order_total_reads_floats_from_the_store():
    lines = [{"price": 20.0, "quantity": 2}, {"price": 0.1, "quantity": 3}]
    assert order_total(lines, 5) == Decimal("45.30")


def test_draft_normalizes_non_breaking_spaces():
    draft = OrderDraft.from_payload({
        "customer_name": "\u00a0 Mariyam\u00a0Ali \u00a0",
        "phone": "7771234",
        "delivery_method": "pickup",
        "payment_method": "cash",
        "orderItems": [{"item_id": "3", "quantity": 2}],
    })
    assert draft.customer_name == "Mariyam Ali"
    assert draft.instagram is None
    assert draft.delivery_charge == Decimal("0.00")
    assert draft.lines[0].item_id == 3


def test_draft_rejects_name_made_of_non_breaking_spaces():
    with pytest.raises(ValidationError):
        OrderDraft.from_payload({
            "customer_name": "\u00a0\u00a0",
            "phone": "1",
            "delivery_method": "pickup",
            "payment_method": "cash",
            "orderItems": [{"item_id": 1, "quantity": 1}],
        })
