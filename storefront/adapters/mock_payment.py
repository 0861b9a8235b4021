import time
from typing import Any, Dict
from uuid import uuid4

from storefront.adapters.stripe_payment import ConfirmationResult

DEMO_CLIENT_SECRET = "simulated_client_secret"


class DemoPaymentAdapter:
    """
    Stand-in provider used when no Stripe secret key is configured.
    Mints a recognisable fake intent so the rest of the flow runs unchanged.
    """

    def create_intent(self, amount_minor_units: int, metadata: Dict[str, str]) -> Dict[str, str]:
        return {"id": f"demo-{uuid4().hex[:12]}", "client_secret": DEMO_CLIENT_SECRET}

    def health_check(self) -> bool:
        return True


class DemoCardConfirmer:
    """Simulates provider processing latency, then reports success."""

    def __init__(self, delay_ms: int = 1500, sleep=time.sleep):
        self.delay_seconds = delay_ms / 1000.0
        self._sleep = sleep

    def confirm_card_payment(
        self, client_secret: str, payment_method: Any, billing_details: Dict[str, Any]
    ) -> ConfirmationResult:
        self._sleep(self.delay_seconds)
        return ConfirmationResult(status="succeeded", intent_id=f"demo-{uuid4().hex[:12]}")
