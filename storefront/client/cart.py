import json
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple, Union

from storefront.config import settings
from storefront.schemas.cart_schema import GIFT_FIELDS, CartLineItem
from storefront.utils.money import parse_price, quantize_cents

log = logging.getLogger(__name__)

CartSnapshot = Tuple[Tuple[int, int, str], ...]


class CartStore:
    """
    Canonical list of cart line items for one browser session.

    Construct once at startup and hand the instance to whatever needs it.
    The persisted list is read exactly once, here; every mutation writes the
    full list back under `key`.
    """

    def __init__(self, storage, key: Optional[str] = None):
        self.storage = storage
        self.key = key or settings.CART_STORAGE_KEY
        self._items: List[CartLineItem] = []
        self._hydrate()

    def _hydrate(self):
        try:
            raw = self.storage.get_item(self.key)
        except OSError:
            log.exception("Could not read stored cart %r, starting empty", self.key)
            return
        if raw is None:
            return
        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError("stored cart is not a list")
            restored = [CartLineItem.model_validate(entry) for entry in data]
        except (ValueError, TypeError) as e:
            log.error("Could not restore cart %r, starting empty: %s", self.key, e)
            return
        for item in restored:
            self._merge(item)

    def _persist(self):
        payload = json.dumps([it.model_dump(by_alias=True) for it in self._items])
        try:
            self.storage.set_item(self.key, payload)
        except OSError:
            # in-memory cart stays authoritative; the next mutation retries the write
            log.exception("Failed to persist cart %r", self.key)

    def _find(self, product_id: int) -> Optional[CartLineItem]:
        return next((it for it in self._items if it.product_id == product_id), None)

    def _merge(self, item: CartLineItem):
        existing = self._find(item.product_id)
        if existing is None:
            self._items.append(item)
            return
        existing.quantity += item.quantity
        for field in GIFT_FIELDS:
            if field in item.model_fields_set:
                setattr(existing, field, getattr(item, field))

    @property
    def items(self) -> List[CartLineItem]:
        return [it.model_copy() for it in self._items]

    def add_item(self, item: Union[CartLineItem, Dict[str, Any]]) -> None:
        """Add a line, or grow the existing line for the same product."""
        if not isinstance(item, CartLineItem):
            item = CartLineItem.model_validate(item)
        else:
            item = item.model_copy()
        self._merge(item)
        self._persist()

    def set_quantity(self, product_id: int, quantity: int) -> None:
        if quantity <= 0:
            self.remove_item(product_id)
            return
        existing = self._find(product_id)
        if existing is None:
            return
        existing.quantity = quantity
        self._persist()

    def remove_item(self, product_id: int) -> None:
        before = len(self._items)
        self._items = [it for it in self._items if it.product_id != product_id]
        if len(self._items) != before:
            self._persist()

    def clear(self) -> None:
        self._items = []
        self._persist()

    @property
    def total_item_count(self) -> int:
        return sum(it.quantity for it in self._items)

    @property
    def subtotal(self) -> Decimal:
        total = sum((parse_price(it.unit_price) * it.quantity for it in self._items), Decimal("0"))
        return quantize_cents(total)

    @property
    def total_price(self) -> str:
        return str(self.subtotal)

    def snapshot(self) -> CartSnapshot:
        """Order-independent fingerprint used to detect cart edits."""
        return tuple(sorted((it.product_id, it.quantity, it.unit_price) for it in self._items))

    def payment_items(self) -> List[Dict[str, Any]]:
        return [
            {"id": it.product_id, "quantity": it.quantity, "price": it.unit_price}
            for it in self._items
        ]
