"""Checkout orchestration: pricing, form rules, and the single order call."""

import pytest
from pydantic import ValidationError

from common.exceptions import OrderCreationError, InsufficientInventoryError
from modules.order.pricing import calculate_subtotal, calculate_shipping
from modules.order.schemas import CheckoutForm
from modules.order.checkout_service import (
    CheckoutService, MSG_EMPTY_CART, MSG_FAILED, MSG_OUT_OF_STOCK, MSG_SUCCESS,
)
from modules.order.models import Order


SHIPPING = {
    "line1": "House 12, Street 4",
    "city": "Lahore",
    "province": "Punjab",
    "postal_code": "54000",
}


def _form(**overrides):
    data = {
        "email": "  Ali@Example.com ",
        "full_name": "Ali Khan",
        "phone": "03001234567",
        "shipping_address": dict(SHIPPING),
        "use_same_address": True,
        "items": [{"variant_id": "v1", "quantity": 2, "price": 2600}],
    }
    data.update(overrides)
    return CheckoutForm(**data)


class FakeOrders:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def create_order(self, db, params):
        self.calls.append(params)
        if self.error:
            raise self.error
        return Order(id="order-1", order_number="WD-250101-ABC123")


# ==========================================
# Pricing
# ==========================================

def test_shipping_boundary():
    assert calculate_shipping(5000) == 0
    assert calculate_shipping(4999) == 200
    assert calculate_shipping(0) == 200


def test_subtotal_accepts_objects_and_dicts():
    form = _form()
    assert calculate_subtotal(form.items) == 5200
    assert calculate_subtotal([{"price": 100, "quantity": 3}]) == 300


# ==========================================
# Form rules
# ==========================================

@pytest.mark.parametrize("phone", ["03001234567", "+923001234567", "00923001234567", "0300-1234567"])
def test_valid_phone_formats(phone):
    assert _form(phone=phone).phone.endswith("3001234567")


@pytest.mark.parametrize("phone", ["3001234567", "04001234567", "+92300123456", "abc"])
def test_invalid_phone_rejected(phone):
    with pytest.raises(ValidationError):
        _form(phone=phone)


def test_postal_code_must_be_five_digits():
    with pytest.raises(ValidationError):
        _form(shipping_address={**SHIPPING, "postal_code": "5400"})


def test_billing_required_when_not_same_address():
    with pytest.raises(ValidationError):
        _form(use_same_address=False)
    form = _form(use_same_address=False, billing_address={**SHIPPING, "city": "Karachi", "province": "Sindh"})
    assert form.billing_record()["city"] == "Karachi"


def test_email_normalized():
    assert _form().email == "ali@example.com"


def test_order_notes_limit():
    with pytest.raises(ValidationError):
        _form(order_notes="x" * 501)


# ==========================================
# Orchestrator
# ==========================================

def test_scenario_two_units_at_2600_ships_free():
    orders = FakeOrders()
    result = CheckoutService(orders).create_order(None, _form(), ip_address="1.2.3.4", user_agent="pytest")

    assert result.success
    assert result.order_number == "WD-250101-ABC123"
    assert result.message == MSG_SUCCESS
    assert len(orders.calls) == 1

    params = orders.calls[0]
    assert params.subtotal == 5200
    assert params.shipping_cost == 0
    assert params.payment_method == "cash_on_delivery"
    assert params.payment_intent_id is None
    assert params.discount_amount == 0
    assert params.tax_rate == 0
    assert params.ip_address == "1.2.3.4"
    assert params.user_agent == "pytest"
    assert [(l.variant_id, l.quantity, l.price) for l in params.cart_items] == [("v1", 2, 2600)]
    assert params.shipping_address == {
        "line1": "House 12, Street 4", "line2": None, "city": "Lahore",
        "province": "Punjab", "postal_code": "54000", "country": "Pakistan",
    }
    assert params.billing_address == params.shipping_address


def test_below_threshold_charges_flat_fee():
    orders = FakeOrders()
    CheckoutService(orders).create_order(None, _form(items=[{"variant_id": "v3", "quantity": 1, "price": 4999}]))
    assert orders.calls[0].shipping_cost == 200


def test_explicit_billing_address_is_used():
    orders = FakeOrders()
    billing = {**SHIPPING, "line1": "Office 9, Mall Road", "city": "Karachi", "province": "Sindh"}
    CheckoutService(orders).create_order(None, _form(use_same_address=False, billing_address=billing))
    assert orders.calls[0].billing_address["line1"] == "Office 9, Mall Road"
    assert orders.calls[0].shipping_address["line1"] == "House 12, Street 4"


def test_empty_cart_makes_no_call():
    orders = FakeOrders()
    result = CheckoutService(orders).create_order(None, _form(items=[]))
    assert not result.success
    assert result.error == MSG_EMPTY_CART
    assert orders.calls == []


def test_procedure_failure_returns_generic_message():
    orders = FakeOrders(error=OrderCreationError("deadlock detected"))
    result = CheckoutService(orders).create_order(None, _form())
    assert not result.success
    assert result.error == MSG_FAILED
    assert "deadlock" not in result.error
    assert len(orders.calls) == 1


def test_stock_shortfall_has_its_own_message():
    orders = FakeOrders(error=InsufficientInventoryError("WA-ACR-18"))
    result = CheckoutService(orders).create_order(None, _form())
    assert result.error == MSG_OUT_OF_STOCK
    assert result.status_code == 409


# ==========================================
# HTTP
# ==========================================

def test_checkout_endpoint_creates_order(client, catalog, db):
    v1 = catalog["v1"]
    resp = client.post("/api/checkout", json={
        "email": "ali@example.com",
        "full_name": "Ali Khan",
        "phone": "03001234567",
        "shipping_address": SHIPPING,
        "items": [{"variant_id": v1.id, "quantity": 2, "price": 2600}],
    }, headers={"X-Forwarded-For": "10.0.0.7, 10.0.0.1"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["orderNumber"].startswith("WD-")

    order = db.query(Order).filter(Order.id == body["orderId"]).one()
    assert order.total_amount == 5200
    assert order.shipping_cost == 0
    assert order.ip_address == "10.0.0.7"


def test_checkout_endpoint_rejects_invalid_form(client):
    resp = client.post("/api/checkout", json={"email": "nope", "items": []})
    assert resp.status_code == 422


def test_checkout_options(client):
    body = client.get("/api/checkout/options").json()
    assert "Punjab" in body["provinces"]
    assert body["freeShippingThreshold"] == 5000
    assert body["shippingCost"] == 200
