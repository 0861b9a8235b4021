from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from storefront.utils.money import parse_price

GIFT_FIELDS = ("is_gift", "gift_recipient_name", "gift_recipient_email", "gift_message")


class CartLineItem(BaseModel):
    """One cart row; serialized with camelCase keys (productId, unitPrice, ...)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    product_id: int
    name: str
    unit_price: str
    image_url: str = ""
    quantity: int = Field(1, ge=1)
    is_gift: bool = False
    gift_recipient_name: Optional[str] = None
    gift_recipient_email: Optional[str] = None
    gift_message: Optional[str] = None

    @field_validator("unit_price", mode="before")
    @classmethod
    def _decimal_string(cls, v):
        return str(parse_price(v))
