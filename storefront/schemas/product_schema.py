from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class CatalogProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    description: Optional[str] = None
    category: str
    price: str
    image_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    stock_quantity: Optional[int] = None
    is_featured: bool
    is_available: bool
    external_source: Optional[str] = None
    external_id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = Field(None, validation_alias="product_metadata")
