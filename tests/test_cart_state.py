"""Cart state: keyed merge, removal, totals, persistence."""

import json

from modules.cart.models import CartItem, CartImage
from modules.cart.state import CartState, MemoryCartStorage, JsonFileCartStorage, STORAGE_KEY


def _item(variant_id="v1", price=2600, quantity=1):
    return CartItem(
        variant_id=variant_id,
        product_name="Wall Art",
        variant_description="Acrylic / 18x18",
        sku=f"SKU-{variant_id}",
        price=price,
        quantity=quantity,
        image=CartImage(storage_path="originals/p/a.jpg", alt_text="art"),
    )


def test_adding_same_variant_merges_quantity():
    cart = CartState()
    cart.add_item(_item(quantity=1))
    cart.add_item(_item(quantity=2))
    assert len(cart.items) == 1
    assert cart.items[0].quantity == 3
    assert cart.get_total_items() == 3


def test_add_does_not_alias_caller_item():
    cart = CartState()
    item = _item()
    cart.add_item(item)
    cart.add_item(_item(quantity=4))
    assert item.quantity == 1


def test_update_quantity_zero_equals_remove():
    a, b = CartState(), CartState()
    for cart in (a, b):
        cart.add_item(_item("v1"))
        cart.add_item(_item("v2", price=1500))
    a.update_quantity("v1", 0)
    b.remove_item("v1")
    assert [i.to_dict() for i in a.items] == [i.to_dict() for i in b.items]
    assert [i.variant_id for i in a.items] == ["v2"]


def test_remove_unknown_variant_is_noop():
    cart = CartState()
    cart.add_item(_item())
    cart.remove_item("missing")
    assert cart.get_total_items() == 1


def test_totals_recomputed():
    cart = CartState()
    cart.add_item(_item("v1", price=2600, quantity=2))
    cart.add_item(_item("v2", price=1500))
    assert cart.get_total_price() == 6700
    cart.update_quantity("v2", 3)
    assert cart.get_total_price() == 2600 * 2 + 1500 * 3
    cart.clear_cart()
    assert cart.get_total_price() == 0
    assert cart.items == []


def test_free_shipping_progress():
    cart = CartState()
    cart.add_item(_item(price=2500))
    progress = cart.free_shipping_progress()
    assert progress == {"qualifies": False, "remaining": 2500, "percent": 50}
    cart.update_quantity("v1", 2)
    assert cart.free_shipping_progress()["qualifies"] is True


def test_checkout_items_shape():
    cart = CartState()
    cart.add_item(_item(quantity=2))
    assert cart.to_checkout_items() == [{"variant_id": "v1", "quantity": 2, "price": 2600}]


def test_drawer_flag_is_not_persisted():
    storage = MemoryCartStorage()
    cart = CartState(storage)
    cart.add_item(_item())
    cart.open_cart()
    assert cart.is_open
    blob = json.loads(storage.get_item(STORAGE_KEY))
    assert "is_open" not in blob["state"]
    assert CartState(storage).is_open is False


def test_persist_and_hydrate_round_trip(tmp_path):
    storage = JsonFileCartStorage(str(tmp_path))
    cart = CartState(storage)
    cart.add_item(_item("v1", quantity=2))
    cart.add_item(_item("v2", price=1500))

    restored = CartState(JsonFileCartStorage(str(tmp_path)))
    assert [i.variant_id for i in restored.items] == ["v1", "v2"]
    assert restored.items[0].image.storage_path == "originals/p/a.jpg"
    assert restored.get_total_price() == 6700


def test_corrupt_blob_hydrates_as_empty():
    storage = MemoryCartStorage()
    storage.set_item(STORAGE_KEY, "{not json")
    cart = CartState(storage)
    assert cart.items == []
    cart.add_item(_item())
    assert json.loads(storage.get_item(STORAGE_KEY))["state"]["items"][0]["variant_id"] == "v1"


def test_undecodable_file_hydrates_as_empty(tmp_path):
    (tmp_path / f"{STORAGE_KEY}.json").write_bytes(b"\xff\xfe\x00garbage")
    cart = CartState(JsonFileCartStorage(str(tmp_path)))
    assert cart.items == []


def test_unreadable_path_hydrates_as_empty(tmp_path):
    (tmp_path / f"{STORAGE_KEY}.json").mkdir()
    cart = CartState(JsonFileCartStorage(str(tmp_path)))
    assert cart.items == []
    assert cart.get_total_items() == 0
