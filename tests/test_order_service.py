"""Order creation transaction: stock, prices, snapshot, rollback."""

import re

import pytest

from common.exceptions import OrderCreationError, InsufficientInventoryError, NotFoundError
from modules.catalog.models import Inventory, Product
from modules.order.models import Order, OrderItem
from modules.order.service import order_service, CreateOrderParams, OrderLine

ADDRESS = {"line1": "House 12, Street 4", "line2": None, "city": "Lahore",
           "province": "Punjab", "postal_code": "54000", "country": "Pakistan"}


def _params(lines, **overrides):
    data = dict(
        customer_email="ali@example.com",
        customer_name="Ali Khan",
        customer_phone="03001234567",
        shipping_address=ADDRESS,
        billing_address=ADDRESS,
        cart_items=lines,
        payment_method="cash_on_delivery",
        shipping_cost=0,
    )
    data.update(overrides)
    return CreateOrderParams(**data)


def _stock(db, variant):
    db.expire_all()
    return db.query(Inventory).filter(Inventory.variant_id == variant.id).one().quantity_available


def test_create_order_decrements_and_snapshots(db, catalog):
    v1, v3 = catalog["v1"], catalog["v3"]
    order = order_service.create_order(db, _params(
        [OrderLine(v1.id, 2, 2600), OrderLine(v3.id, 1, 1500)],
        subtotal=6700, shipping_cost=0,
    ))

    assert re.match(r"^WD-\d{6}-[A-Z0-9]{6}$", order.order_number)
    assert order.status == "pending"
    assert order.subtotal == 6700
    assert order.total_amount == 6700
    assert order.total_amount == order.grand_total

    assert _stock(db, v1) == 3
    assert _stock(db, v3) == 9
    assert db.query(Product).filter(Product.id == catalog["wall_art"].id).one().total_sold == 5

    items = order_service.get_order_items(db, order.id)
    assert [(i.sku, i.quantity, i.unit_price, i.total_price) for i in items] == [
        ("WA-ACR-18", 2, 2600, 5200),
        ("CA-WOD-12", 1, 1500, 1500),
    ]
    assert items[0].product_name == "Wall Art"
    assert items[0].variant_description == "Acrylic / 18x18"


def test_shortfall_rolls_back_everything(db, catalog):
    v1, v2 = catalog["v1"], catalog["v2"]
    with pytest.raises(InsufficientInventoryError):
        order_service.create_order(db, _params([OrderLine(v1.id, 1, 2600), OrderLine(v2.id, 1, 5400)]))

    assert _stock(db, v1) == 5
    assert db.query(Order).count() == 0
    assert db.query(OrderItem).count() == 0


def test_price_mismatch_rejected(db, catalog):
    v1 = catalog["v1"]
    with pytest.raises(OrderCreationError):
        order_service.create_order(db, _params([OrderLine(v1.id, 1, 100)]))
    assert _stock(db, v1) == 5
    assert db.query(Order).count() == 0


def test_unknown_variant_rejected(db, catalog):
    with pytest.raises(OrderCreationError):
        order_service.create_order(db, _params([OrderLine("no-such-variant", 1, 100)]))


def test_duplicate_lines_are_checked_together(db, catalog):
    v1 = catalog["v1"]
    with pytest.raises(InsufficientInventoryError):
        order_service.create_order(db, _params([OrderLine(v1.id, 3, 2600), OrderLine(v1.id, 3, 2600)]))
    assert _stock(db, v1) == 5


def test_order_numbers_are_unique(db, catalog):
    v3 = catalog["v3"]
    numbers = {
        order_service.create_order(db, _params([OrderLine(v3.id, 1, 1500)], shipping_cost=200)).order_number
        for _ in range(3)
    }
    assert len(numbers) == 3


def test_confirmation_summary(db, catalog):
    v3 = catalog["v3"]
    order = order_service.create_order(db, _params([OrderLine(v3.id, 2, 1500)], shipping_cost=200))
    summary = order_service.get_confirmation(db, order.id)
    assert summary["order_number"] == order.order_number
    assert summary["total_amount"] == 3200
    assert summary["items"][0]["quantity"] == 2
    assert order_service.get_confirmation(db, "missing") is None


def test_update_status(db, catalog):
    v3 = catalog["v3"]
    order = order_service.create_order(db, _params([OrderLine(v3.id, 1, 1500)], shipping_cost=200))
    order_service.update_status(db, order.id, "confirmed")
    assert order_service.get_order(db, order.id).status == "confirmed"

    with pytest.raises(NotFoundError):
        order_service.update_status(db, "missing", "confirmed")


def test_confirmation_endpoint(client, db, catalog):
    v3 = catalog["v3"]
    order = order_service.create_order(db, _params([OrderLine(v3.id, 1, 1500)], shipping_cost=200))
    resp = client.get(f"/api/orders/{order.id}")
    assert resp.status_code == 200
    assert resp.json()["order_number"] == order.order_number
    assert client.get("/api/orders/missing").status_code == 404
