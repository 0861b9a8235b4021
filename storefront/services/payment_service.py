import json
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from storefront.adapters.mock_payment import DemoPaymentAdapter
from storefront.adapters.stripe_payment import PaymentProviderError, StripePaymentAdapter
from storefront.config import settings
from storefront.errors import StorefrontError
from storefront.utils.money import parse_price, quantize_cents, to_minor_units

log = logging.getLogger(__name__)

# Stripe caps each metadata value at 500 characters
METADATA_VALUE_LIMIT = 500


class PaymentBridgeError(StorefrontError):
    pass


def default_payment_adapter():
    if settings.STRIPE_SECRET_KEY:
        return StripePaymentAdapter(settings.STRIPE_SECRET_KEY, currency=settings.PAYMENT_CURRENCY)
    return DemoPaymentAdapter()


class PaymentIntentBridge:
    def __init__(self, adapter=None, tolerance: Optional[int] = None):
        self.adapter = adapter or default_payment_adapter()
        self.tolerance = settings.PAYMENT_AMOUNT_TOLERANCE if tolerance is None else tolerance

    @property
    def mode(self) -> str:
        return "demo" if isinstance(self.adapter, DemoPaymentAdapter) else "stripe"

    def expected_amount(self, items: List[Dict[str, Any]]) -> int:
        subtotal = Decimal("0")
        for it in items:
            try:
                qty = int(it.get("quantity") or 0)
            except (TypeError, ValueError):
                raise PaymentBridgeError("Invalid item quantity")
            if qty <= 0:
                raise PaymentBridgeError("Invalid item quantity")
            try:
                price = parse_price(it.get("price"))
            except ValueError:
                raise PaymentBridgeError("Invalid item price")
            subtotal += price * qty
        return to_minor_units(quantize_cents(subtotal))

    def validate_amount(self, items: List[Dict[str, Any]], amount_minor_units) -> int:
        """
        Return the amount as whole minor units.
        Client-side formatting may leave the amount a fraction or a cent off
        the item total; only differences beyond the tolerance are rejected.
        """
        try:
            amount = to_minor_units(Decimal(str(amount_minor_units)) / 100)
        except (ArithmeticError, ValueError):
            raise PaymentBridgeError("Invalid amount")
        if amount <= 0:
            raise PaymentBridgeError("Invalid amount")
        if not items:
            raise PaymentBridgeError("Cart is empty")
        expected = self.expected_amount(items)
        if abs(expected - amount) > self.tolerance:
            log.warning("Payment amount mismatch: got %s, items total %s", amount, expected)
            raise PaymentBridgeError("Amount does not match cart total")
        return amount

    def create_payment_intent(self, items: List[Dict[str, Any]], amount_minor_units) -> Dict[str, Any]:
        """
        Mint a provider-side intent for a cart snapshot.
        Every call creates a new intent; callers must not repeat it for the
        same checkout attempt.
        """
        amount = self.validate_amount(items, amount_minor_units)
        summary = [{"id": it.get("id"), "quantity": int(it.get("quantity"))} for it in items]
        metadata = {"items": json.dumps(summary)[:METADATA_VALUE_LIMIT]}
        try:
            intent = self.adapter.create_intent(amount, metadata)
        except PaymentProviderError as e:
            raise PaymentBridgeError(str(e) or "Failed to create payment intent", status_code=502)
        log.info("Created payment intent %s for %s minor units (%s)", intent.get("id"), amount, self.mode)
        return {"clientSecret": intent["client_secret"], "amount": amount}
