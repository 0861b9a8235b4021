"""
Stripe adapter: every call to the payment provider goes through here.

Server side mints PaymentIntents with the secret key. Card confirmation uses
the publishable key plus the intent's client secret, the same call Stripe.js
makes from a browser, so the checkout flow never needs the secret key.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import stripe

log = logging.getLogger(__name__)


class PaymentProviderError(Exception):
    """Provider unreachable or refused the request outright."""
    pass


@dataclass
class ConfirmationResult:
    status: Optional[str] = None
    error_message: Optional[str] = None
    intent_id: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error_message is None and self.status == "succeeded"


def intent_id_from_secret(client_secret: str) -> str:
    # client secrets look like "pi_123_secret_abc"
    return (client_secret or "").split("_secret_")[0]


def _drop_empty(d: Dict[str, Any]) -> Dict[str, Any]:
    out = {}
    for k, v in d.items():
        if isinstance(v, dict):
            v = _drop_empty(v)
        if v not in (None, "", {}):
            out[k] = v
    return out


class StripePaymentAdapter:
    def __init__(self, secret_key: str, currency: str = "usd"):
        self.secret_key = secret_key
        self.currency = currency

    def create_intent(self, amount_minor_units: int, metadata: Dict[str, str]) -> Dict[str, str]:
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount_minor_units,
                currency=self.currency,
                automatic_payment_methods={"enabled": True, "allow_redirects": "never"},
                metadata=metadata,
                api_key=self.secret_key,
            )
        except stripe.StripeError as e:
            log.error("Stripe rejected payment intent creation: %s", e)
            raise PaymentProviderError(e.user_message or "Failed to create payment intent")
        return {"id": intent["id"], "client_secret": intent["client_secret"]}

    def health_check(self) -> bool:
        return bool(self.secret_key)


class StripeCardConfirmer:
    def __init__(self, publishable_key: str):
        self.publishable_key = publishable_key

    def confirm_card_payment(
        self, client_secret: str, payment_method: str, billing_details: Dict[str, Any]
    ) -> ConfirmationResult:
        """
        Confirm the intent with a card token (e.g. "tok_visa") and billing details.
        Provider-side refusals (declines, invalid requests) come back as an
        error result; only connectivity failures raise PaymentProviderError.
        """
        intent_id = intent_id_from_secret(client_secret)
        try:
            intent = stripe.PaymentIntent.confirm(
                intent_id,
                client_secret=client_secret,
                payment_method_data={
                    "type": "card",
                    "card": {"token": payment_method},
                    "billing_details": _drop_empty(billing_details),
                },
                api_key=self.publishable_key,
            )
        except stripe.APIConnectionError as e:
            log.warning("Stripe unreachable while confirming %s: %s", intent_id, e)
            raise PaymentProviderError("Could not reach the payment provider")
        except stripe.StripeError as e:
            return ConfirmationResult(
                error_message=e.user_message or str(e) or "An error occurred during payment processing",
                intent_id=intent_id,
            )
        return ConfirmationResult(status=intent["status"], intent_id=intent_id)
