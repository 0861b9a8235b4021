from fastapi import APIRouter

from storefront.schemas.payment_schema import CreatePaymentIntentIn
from storefront.services.payment_service import PaymentIntentBridge

router = APIRouter(tags=["payments"])


@router.post("/api/create-payment-intent", summary="Create a payment intent for a cart snapshot")
def create_payment_intent(payload: CreatePaymentIntentIn):
    # PaymentBridgeError is rendered as {"message": ...} by the app's handler
    bridge = PaymentIntentBridge()
    return bridge.create_payment_intent(payload.items, payload.amount)
