from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

_FORM_CONFIG = ConfigDict(
    alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True
)


class Address(BaseModel):
    model_config = _FORM_CONFIG
    line1: str = Field(..., min_length=1)
    line2: Optional[str] = None
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    postal_code: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)


class CustomerDetails(BaseModel):
    model_config = _FORM_CONFIG
    full_name: str = Field(..., min_length=2)
    email: EmailStr
    address: Address

    def billing_details(self) -> dict:
        """Billing block in the shape the payment provider expects."""
        return {
            "name": self.full_name,
            "email": str(self.email),
            "address": {
                "line1": self.address.line1,
                "line2": self.address.line2,
                "city": self.address.city,
                "state": self.address.state,
                "postal_code": self.address.postal_code,
                "country": self.address.country,
            },
        }
