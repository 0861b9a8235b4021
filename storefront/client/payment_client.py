import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

log = logging.getLogger(__name__)

CREATE_INTENT_PATH = "/api/create-payment-intent"


class PaymentIntentRequestError(Exception):
    pass


@dataclass
class PaymentIntent:
    client_secret: str
    amount_minor_units: int


class HttpPaymentIntentClient:
    """Calls the payment intent bridge over HTTP. No retries: failures go straight back to the caller."""

    def __init__(self, base_url: str = "", session=None, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def create_payment_intent(
        self, items: List[Dict[str, Any]], amount_minor_units: int
    ) -> PaymentIntent:
        try:
            r = self.session.post(
                f"{self.base_url}{CREATE_INTENT_PATH}",
                json={"items": items, "amount": amount_minor_units},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            log.warning("Payment intent request failed: %s", e)
            raise PaymentIntentRequestError(str(e))

        body: Optional[dict]
        try:
            body = r.json()
        except ValueError:
            body = None
        if r.status_code >= 400 or not isinstance(body, dict) or not body.get("clientSecret"):
            message = (body or {}).get("message") if isinstance(body, dict) else None
            raise PaymentIntentRequestError(message or f"Payment intent request failed ({r.status_code})")
        return PaymentIntent(
            client_secret=body["clientSecret"],
            amount_minor_units=int(body.get("amount") or amount_minor_units),
        )
