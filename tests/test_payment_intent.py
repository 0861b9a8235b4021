import json

import pytest
import stripe

from storefront.adapters.stripe_payment import (
    PaymentProviderError,
    StripeCardConfirmer,
    StripePaymentAdapter,
    intent_id_from_secret,
)
from storefront.services import payment_service
from storefront.services.payment_service import PaymentBridgeError, PaymentIntentBridge

ITEMS = [
    {"id": 1, "quantity": 2, "price": "12.50"},
    {"id": 2, "quantity": 1, "price": "7.00"},
]


class RecordingAdapter:
    def __init__(self):
        self.calls = []

    def create_intent(self, amount_minor_units, metadata):
        self.calls.append((amount_minor_units, metadata))
        return {"id": f"pi_{len(self.calls)}", "client_secret": f"pi_{len(self.calls)}_secret_abc"}


class DownAdapter:
    def create_intent(self, amount_minor_units, metadata):
        raise PaymentProviderError("Payment provider unavailable")

    def health_check(self):
        return False


def test_create_intent_demo_mode(client):
    r = client.post("/api/create-payment-intent", json={"items": ITEMS, "amount": 3200})
    assert r.status_code == 200
    assert r.json() == {"clientSecret": "simulated_client_secret", "amount": 3200}


def test_fractional_client_amount_is_rounded(client):
    # parseFloat("32.00") * 100 style drift from browsers
    r = client.post("/api/create-payment-intent", json={"items": ITEMS, "amount": 3199.9999999})
    assert r.status_code == 200
    assert r.json()["amount"] == 3200


def test_cent_level_mismatch_tolerated_gross_mismatch_rejected(client):
    assert client.post("/api/create-payment-intent", json={"items": ITEMS, "amount": 3201}).status_code == 200
    r = client.post("/api/create-payment-intent", json={"items": ITEMS, "amount": 2500})
    assert r.status_code == 400
    assert r.json() == {"message": "Amount does not match cart total"}


@pytest.mark.parametrize("amount", [0, -100])
def test_non_positive_amount_rejected(client, amount):
    r = client.post("/api/create-payment-intent", json={"items": ITEMS, "amount": amount})
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid amount"


def test_empty_items_rejected(client):
    r = client.post("/api/create-payment-intent", json={"items": [], "amount": 100})
    assert r.status_code == 400
    assert r.json()["message"] == "Cart is empty"


def test_provider_unavailable_maps_to_502(client, monkeypatch):
    monkeypatch.setattr(payment_service, "default_payment_adapter", lambda: DownAdapter())
    r = client.post("/api/create-payment-intent", json={"items": ITEMS, "amount": 3200})
    assert r.status_code == 502
    assert r.json() == {"message": "Payment provider unavailable"}


def test_each_call_mints_a_new_intent_with_item_metadata():
    adapter = RecordingAdapter()
    bridge = PaymentIntentBridge(adapter=adapter)
    first = bridge.create_payment_intent(ITEMS, 3200)
    second = bridge.create_payment_intent(ITEMS, 3200)
    assert first["clientSecret"] != second["clientSecret"]
    amount, metadata = adapter.calls[0]
    assert amount == 3200
    assert json.loads(metadata["items"]) == [{"id": 1, "quantity": 2}, {"id": 2, "quantity": 1}]


def test_invalid_item_price_rejected():
    bridge = PaymentIntentBridge(adapter=RecordingAdapter())
    with pytest.raises(PaymentBridgeError) as exc:
        bridge.create_payment_intent([{"id": 1, "quantity": 1, "price": "abc"}], 100)
    assert exc.value.status_code == 400


def test_intent_id_from_client_secret():
    assert intent_id_from_secret("pi_3Abc_secret_xyz") == "pi_3Abc"


@pytest.mark.parametrize(
    "body, message",
    [
        ({"items": ITEMS}, "Invalid amount"),
        ({"items": ITEMS, "amount": "abc"}, "Invalid amount"),
        ({"items": [{"id": 1, "quantity": 0, "price": "12.50"}], "amount": 1250}, "Invalid item quantity"),
        ({"items": [{"id": 1, "quantity": "two", "price": "12.50"}], "amount": 2500}, "Invalid item quantity"),
        ({"items": [{"id": 1, "quantity": 1}], "amount": 1250}, "Invalid item price"),
        ({"amount": 1250}, "Cart is empty"),
    ],
)
def test_malformed_requests_get_a_message_body(client, body, message):
    r = client.post("/api/create-payment-intent", json=body)
    assert r.status_code == 400
    assert r.json() == {"message": message}


class StripeIntents:
    """Stands in for stripe.PaymentIntent.create / confirm."""

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def __call__(self, *args, **kwargs):
        self.calls.append((args, kwargs))
        if self.error is not None:
            raise self.error
        return self.result


def test_stripe_adapter_creates_intent_with_secret_key(monkeypatch):
    create = StripeIntents(result={"id": "pi_9", "client_secret": "pi_9_secret_q", "status": "requires_payment_method"})
    monkeypatch.setattr(stripe.PaymentIntent, "create", create)
    adapter = StripePaymentAdapter("sk_test_abc", currency="usd")

    assert adapter.create_intent(3200, {"items": "[]"}) == {"id": "pi_9", "client_secret": "pi_9_secret_q"}
    _, kwargs = create.calls[0]
    assert kwargs["amount"] == 3200
    assert kwargs["api_key"] == "sk_test_abc"
    assert kwargs["metadata"] == {"items": "[]"}


def test_stripe_adapter_maps_provider_errors(monkeypatch):
    monkeypatch.setattr(
        stripe.PaymentIntent, "create", StripeIntents(error=stripe.AuthenticationError("Invalid API Key provided"))
    )
    with pytest.raises(PaymentProviderError) as exc:
        StripePaymentAdapter("sk_bad").create_intent(3200, {})
    assert str(exc.value) == "Invalid API Key provided"


def test_stripe_bridge_failure_is_502(client, monkeypatch):
    monkeypatch.setattr(
        stripe.PaymentIntent, "create", StripeIntents(error=stripe.APIConnectionError("Network down"))
    )
    monkeypatch.setattr(
        payment_service, "default_payment_adapter", lambda: StripePaymentAdapter("sk_test_abc")
    )
    r = client.post("/api/create-payment-intent", json={"items": ITEMS, "amount": 3200})
    assert r.status_code == 502
    assert r.json() == {"message": "Network down"}


BILLING = {
    "name": "Jamie Rivera",
    "email": "jamie@rockmail.com",
    "address": {"line1": "12 Stage Door Rd", "line2": None, "city": "Austin", "postal_code": "73301"},
}


def test_card_confirmation_success(monkeypatch):
    confirm = StripeIntents(result={"id": "pi_9", "status": "succeeded"})
    monkeypatch.setattr(stripe.PaymentIntent, "confirm", confirm)

    result = StripeCardConfirmer("pk_test_123").confirm_card_payment("pi_9_secret_q", "tok_visa", BILLING)

    assert result.succeeded
    assert result.intent_id == "pi_9"
    args, kwargs = confirm.calls[0]
    assert args == ("pi_9",)
    assert kwargs["client_secret"] == "pi_9_secret_q"
    assert kwargs["api_key"] == "pk_test_123"
    method = kwargs["payment_method_data"]
    assert method["card"] == {"token": "tok_visa"}
    assert "line2" not in method["billing_details"]["address"]
    assert method["billing_details"]["address"]["city"] == "Austin"


def test_card_decline_is_returned_as_error_message(monkeypatch):
    monkeypatch.setattr(
        stripe.PaymentIntent,
        "confirm",
        StripeIntents(error=stripe.CardError("Your card was declined.", None, "card_declined")),
    )
    result = StripeCardConfirmer("pk_test_123").confirm_card_payment("pi_9_secret_q", "tok_chargeDeclined", BILLING)
    assert not result.succeeded
    assert result.error_message == "Your card was declined."


def test_card_confirmation_unreachable_provider_raises(monkeypatch):
    monkeypatch.setattr(
        stripe.PaymentIntent, "confirm", StripeIntents(error=stripe.APIConnectionError("Network down"))
    )
    with pytest.raises(PaymentProviderError):
        StripeCardConfirmer("pk_test_123").confirm_card_payment("pi_9_secret_q", "tok_visa", BILLING)
