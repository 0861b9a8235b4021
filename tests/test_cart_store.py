import json
from decimal import Decimal

import pytest
from filelock import FileLock
from pydantic import ValidationError

from storefront.client.cart import CartStore
from storefront.client.storage import JsonFileStorage, MemoryStorage

KEY = "test-cart"


def _item(product_id=1, price="12.50", qty=1, **extra):
    return {"productId": product_id, "name": f"Item {product_id}", "unitPrice": price, "quantity": qty, **extra}


def test_adding_same_product_merges_into_one_line():
    cart = CartStore(MemoryStorage(), key=KEY)
    for qty in (1, 2, 4):
        cart.add_item(_item(7, qty=qty))
    assert len(cart.items) == 1
    assert cart.items[0].quantity == 7
    assert cart.total_item_count == 7


def test_gift_fields_come_from_newest_add():
    cart = CartStore(MemoryStorage(), key=KEY)
    cart.add_item(_item(3, giftMessage="old", giftRecipientName="Sam"))
    cart.add_item(_item(3, isGift=True, giftMessage="Enjoy the show"))
    line = cart.items[0]
    assert line.is_gift is True
    assert line.gift_message == "Enjoy the show"
    assert line.gift_recipient_name == "Sam"


def test_subtotal_is_exact_decimal_and_order_independent():
    a = CartStore(MemoryStorage(), key=KEY)
    for _ in range(3):
        a.add_item(_item(1, price="0.10"))
    a.add_item(_item(2, price="0.20", qty=2))

    b = CartStore(MemoryStorage(), key=KEY)
    b.add_item(_item(2, price="0.20", qty=1))
    b.add_item(_item(9, price="5.00"))
    b.add_item(_item(1, price="0.10", qty=3))
    b.add_item(_item(2, price="0.20", qty=1))
    b.remove_item(9)

    assert a.subtotal == Decimal("0.70")
    assert b.subtotal == a.subtotal
    assert a.total_price == "0.70"


def test_set_quantity_zero_removes_and_does_not_resurrect():
    cart = CartStore(MemoryStorage(), key=KEY)
    cart.add_item(_item(5, qty=2))
    cart.set_quantity(5, 0)
    assert cart.items == []
    cart.set_quantity(5, 3)
    assert cart.items == []


def test_set_quantity_overwrites_and_remove_is_idempotent():
    cart = CartStore(MemoryStorage(), key=KEY)
    cart.add_item(_item(5, qty=2))
    cart.set_quantity(5, 9)
    assert cart.items[0].quantity == 9
    cart.remove_item(5)
    cart.remove_item(5)
    assert cart.total_item_count == 0


def test_non_positive_quantity_is_rejected_on_add():
    cart = CartStore(MemoryStorage(), key=KEY)
    with pytest.raises(ValidationError):
        cart.add_item(_item(1, qty=0))
    assert cart.items == []


def test_cart_survives_reload_from_file(tmp_path):
    storage = JsonFileStorage(str(tmp_path / "storage.json"))
    cart = CartStore(storage, key=KEY)
    cart.add_item(_item(1, price="12.50", qty=2, imageUrl="https://cdn/x.jpg"))
    cart.add_item(_item(2, price="7.00"))

    reloaded = CartStore(JsonFileStorage(str(tmp_path / "storage.json")), key=KEY)
    assert [(it.product_id, it.quantity) for it in reloaded.items] == [(1, 2), (2, 1)]
    assert reloaded.subtotal == Decimal("32.00")

    raw = json.loads(storage.get_item(KEY))
    assert raw[0]["productId"] == 1
    assert raw[0]["unitPrice"] == "12.50"
    assert raw[0]["imageUrl"] == "https://cdn/x.jpg"


def test_corrupt_stored_cart_falls_back_to_empty(caplog):
    storage = MemoryStorage({KEY: "{not json"})
    cart = CartStore(storage, key=KEY)
    assert cart.items == []
    assert "Could not restore cart" in caplog.text
    cart.add_item(_item(1))
    assert json.loads(storage.get_item(KEY))[0]["productId"] == 1


def test_stored_cart_with_bad_entry_falls_back_to_empty():
    storage = MemoryStorage({KEY: json.dumps([{"productId": 1, "quantity": -2}])})
    assert CartStore(storage, key=KEY).items == []


def test_clear_persists_empty_list():
    storage = MemoryStorage()
    cart = CartStore(storage, key=KEY)
    cart.add_item(_item(1))
    cart.clear()
    assert storage.get_item(KEY) == "[]"
    assert CartStore(storage, key=KEY).items == []


def test_locked_storage_at_startup_starts_empty(tmp_path, caplog):
    path = str(tmp_path / "cart.json")
    JsonFileStorage(path).set_item(KEY, json.dumps([_item(1)]))
    held = FileLock(path + ".lock")
    with held:
        cart = CartStore(JsonFileStorage(path, lock_timeout=0.05), key=KEY)
    assert cart.items == []
    assert "Could not read stored cart" in caplog.text
