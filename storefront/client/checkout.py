"""
Two-step checkout: customer details, then payment.

There is no failed state. Any payment problem keeps the flow in PAYMENT with
`payment_error` set so the user can correct and resubmit; success clears the
cart and points `redirect_to` at the confirmation page.
"""
import enum
import logging
import threading
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from storefront.adapters.mock_payment import DEMO_CLIENT_SECRET, DemoCardConfirmer
from storefront.adapters.stripe_payment import PaymentProviderError, StripeCardConfirmer
from storefront.client.cart import CartStore
from storefront.client.payment_client import PaymentIntent, PaymentIntentRequestError
from storefront.config import settings
from storefront.schemas.checkout_schema import CustomerDetails
from storefront.utils.money import to_minor_units

log = logging.getLogger(__name__)

CART_PATH = "/cart"
CONFIRMATION_PATH = "/order-confirmation"

INIT_ERROR = "Unable to initialize payment. Please try again later."
GENERIC_PAYMENT_ERROR = "Payment processing failed. Please try again."

FIELD_MESSAGES = {
    "fullName": "Name is required",
    "email": "Valid email is required",
    "address": "Address is required",
    "address.line1": "Address is required",
    "address.city": "City is required",
    "address.state": "State/Province is required",
    "address.postalCode": "Zip/Postal code is required",
    "address.country": "Country is required",
}


class CheckoutStep(str, enum.Enum):
    DETAILS = "details"
    PAYMENT = "payment"


def field_errors(exc: ValidationError) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    for err in exc.errors():
        path = ".".join(str(p) for p in err["loc"])
        errors.setdefault(path, FIELD_MESSAGES.get(path, err["msg"]))
    return errors


class CheckoutOrchestrator:
    def __init__(
        self,
        cart: CartStore,
        intent_client,
        confirmer=None,
        publishable_key: Optional[str] = None,
        on_success: Optional[Callable[[], None]] = None,
        demo_delay_ms: Optional[int] = None,
    ):
        self.cart = cart
        self.intent_client = intent_client
        self.publishable_key = settings.STRIPE_PUBLIC_KEY if publishable_key is None else publishable_key
        if confirmer is None:
            if self.demo_mode:
                delay = settings.PAYMENT_DEMO_DELAY_MS if demo_delay_ms is None else demo_delay_ms
                confirmer = DemoCardConfirmer(delay_ms=delay)
            else:
                confirmer = StripeCardConfirmer(self.publishable_key)
        self.confirmer = confirmer
        self.on_success = on_success

        self.step = CheckoutStep.DETAILS
        self.customer: Optional[CustomerDetails] = None
        self.field_errors: Dict[str, str] = {}
        self.payment_error: Optional[str] = None
        self.intent: Optional[PaymentIntent] = None
        self._intent_snapshot = None
        self.pending = False
        self.processing = False
        self.completed = False
        self.redirect_to: Optional[str] = None
        self._submit_lock = threading.Lock()

    @property
    def demo_mode(self) -> bool:
        return not self.publishable_key

    @property
    def can_submit(self) -> bool:
        return (
            self.step == CheckoutStep.PAYMENT
            and self.intent is not None
            and not self.pending
            and not self.processing
            and not self.completed
        )

    def submit_details(self, form: Dict[str, Any]) -> bool:
        """Validate step 1; on success move to PAYMENT. Details stay in memory only."""
        try:
            self.customer = CustomerDetails.model_validate(form)
        except ValidationError as e:
            self.field_errors = field_errors(e)
            return False
        self.field_errors = {}
        self.step = CheckoutStep.PAYMENT
        return self.enter_payment()

    def enter_payment(self) -> bool:
        self.payment_error = None
        if self.cart.total_item_count == 0:
            log.info("Checkout aborted: cart is empty")
            self.redirect_to = CART_PATH
            return False
        if self.intent is not None and self._intent_snapshot == self.cart.snapshot():
            return True
        return self._create_intent()

    def back_to_details(self) -> None:
        # the intent survives; it is reused if the cart is unchanged on return
        self.step = CheckoutStep.DETAILS
        self.payment_error = None

    def _create_intent(self) -> bool:
        snapshot = self.cart.snapshot()
        amount = to_minor_units(self.cart.subtotal)
        if self.demo_mode:
            self.intent = PaymentIntent(client_secret=DEMO_CLIENT_SECRET, amount_minor_units=amount)
            self._intent_snapshot = snapshot
            return True
        self.pending = True
        try:
            self.intent = self.intent_client.create_payment_intent(self.cart.payment_items(), amount)
            self._intent_snapshot = snapshot
        except PaymentIntentRequestError as e:
            log.error("Error creating payment intent: %s", e)
            self.intent = None
            self._intent_snapshot = None
            self.payment_error = INIT_ERROR
            return False
        finally:
            self.pending = False
        return True

    def submit_payment(self, payment_method: Optional[str] = None) -> bool:
        """
        Confirm the payment. Returns True only when the order completed.
        A second call while one is in flight is refused, not queued.
        """
        if self.step != CheckoutStep.PAYMENT or self.completed or self.customer is None:
            return False
        # a failed intent is only retried by re-entering the Payment step
        if self.intent is None:
            return False
        if not self._submit_lock.acquire(blocking=False):
            return False
        try:
            self.processing = True
            self.payment_error = None
            if self.cart.total_item_count == 0:
                self.redirect_to = CART_PATH
                return False
            # a cart edited after the intent was minted needs a fresh intent
            if self._intent_snapshot != self.cart.snapshot():
                if not self._create_intent():
                    return False
            try:
                result = self.confirmer.confirm_card_payment(
                    self.intent.client_secret, payment_method, self.customer.billing_details()
                )
            except PaymentProviderError as e:
                self.payment_error = str(e) or "An unexpected error occurred"
                return False
            if result.error_message:
                self.payment_error = result.error_message
                return False
            if result.status != "succeeded":
                log.warning("Payment intent ended in status %r", result.status)
                self.payment_error = GENERIC_PAYMENT_ERROR
                return False
            self._complete()
            return True
        finally:
            self.processing = False
            self._submit_lock.release()

    def _complete(self) -> None:
        self.cart.clear()
        self.completed = True
        self.customer = None
        self.intent = None
        self._intent_snapshot = None
        self.redirect_to = CONFIRMATION_PATH
        if self.on_success:
            self.on_success()
