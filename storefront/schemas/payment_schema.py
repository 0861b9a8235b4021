from typing import Any, Dict, List

from pydantic import BaseModel, Field


class CreatePaymentIntentIn(BaseModel):
    # {id, quantity, price} per item; PaymentIntentBridge validates the values
    items: List[Dict[str, Any]] = Field(default_factory=list)
    amount: Any = None  # minor units; fractional values are rounded
