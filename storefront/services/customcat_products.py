"""
Normalization of CustomCat records into catalog product fields, and the
layered image lookup that keeps product images from coming up blank.
"""
from typing import Any, Dict, List, Optional, Tuple

from storefront.models.catalog_product import CUSTOMCAT_SOURCE
from storefront.utils.money import format_price

DEFAULT_NAME = "CustomCat Product"
DEFAULT_PRICE = "19.99"
DEFAULT_CATEGORY = "Apparel"
DESCRIPTION_BULLETS = 5


class MalformedRecord(ValueError):
    pass


def ensure_https(url: Optional[str]) -> Optional[str]:
    if url and url.startswith("//"):
        return "https:" + url
    return url


def _first_with_image(colors: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(colors, list):
        return None
    return next((c for c in colors if isinstance(c, dict) and c.get("product_image")), None)


def resolve_images(
    metadata: Any, image_url: Optional[str] = None, thumbnail_url: Optional[str] = None
) -> Tuple[Optional[str], Optional[str]]:
    """
    Pick (image_url, thumbnail_url) from stored metadata, first hit wins:
      1. customcat_original.product_image / back_image
      2. first customcat_original.product_colors entry with an image
      3. first customcat_data.product_colors entry with an image
    Protocol-relative picks become https. With no hit the given values are
    returned untouched; placeholders are the storefront's business.
    """
    if not isinstance(metadata, dict):
        return image_url, thumbnail_url

    image = thumb = None
    original = metadata.get("customcat_original")
    if isinstance(original, dict):
        image = original.get("product_image") or None
        thumb = original.get("back_image") or None
        if not image:
            color = _first_with_image(original.get("product_colors"))
            if color:
                image = color["product_image"]
                thumb = color.get("back_image") or thumb
    if not image:
        data = metadata.get("customcat_data")
        color = _first_with_image(data.get("product_colors")) if isinstance(data, dict) else None
        if color:
            image = color["product_image"]
            thumb = color.get("back_image") or thumb

    return (
        ensure_https(image) if image else image_url,
        ensure_https(thumb) if thumb else thumbnail_url,
    )


def process_product_images(product: Dict[str, Any]) -> Dict[str, Any]:
    """Apply resolve_images to a serialized product; non-CustomCat products pass through."""
    if product.get("external_source") != CUSTOMCAT_SOURCE:
        return product
    out = dict(product)
    out["image_url"], out["thumbnail_url"] = resolve_images(
        out.get("metadata"), out.get("image_url"), out.get("thumbnail_url")
    )
    return out


def _external_id(record: Dict[str, Any]) -> Optional[str]:
    for key in ("catalog_product_id", "id", "product_id"):
        value = record.get(key)
        if value not in (None, ""):
            return str(value)
    return None


def _description(record: Dict[str, Any]) -> Optional[str]:
    bullets = [
        f"• {record[k]}"
        for k in (f"product_description_bullet{i}" for i in range(1, DESCRIPTION_BULLETS + 1))
        if record.get(k)
    ]
    if bullets:
        return "\n".join(bullets)
    return record.get("description") or None


def format_customcat_product(record: Any) -> Dict[str, Any]:
    """Map one raw CustomCat record to CatalogProduct column values."""
    if not isinstance(record, dict):
        raise MalformedRecord("record is not an object")
    external_id = _external_id(record)
    if external_id is None:
        raise MalformedRecord("record has no product id")

    base_cost = record.get("base_cost")
    try:
        price = format_price(base_cost) if base_cost not in (None, "") else DEFAULT_PRICE
    except ValueError:
        raise MalformedRecord(f"unparsable base_cost {base_cost!r}")

    quantity = record.get("quantity")
    try:
        stock_quantity = int(quantity) if quantity not in (None, "") else None
    except (TypeError, ValueError):
        raise MalformedRecord(f"unparsable quantity {quantity!r}")

    # newer catalog responses carry colors[].image or a flat image
    image_url = None
    colors = record.get("colors")
    if isinstance(colors, list) and colors and isinstance(colors[0], dict):
        image_url = colors[0].get("image") or None
    image_url = ensure_https(image_url or record.get("image") or None)

    metadata = {"external_id": external_id, "customcat_original": record}
    image_url, thumbnail_url = resolve_images(metadata, image_url, None)

    return {
        "name": record.get("name") or record.get("product_name") or DEFAULT_NAME,
        "description": _description(record),
        "category": record.get("category") or record.get("subcategory") or DEFAULT_CATEGORY,
        "price": price,
        "image_url": image_url,
        "thumbnail_url": thumbnail_url,
        "stock_quantity": stock_quantity,
        "is_featured": False,
        "is_available": record.get("in_stock") is not False,
        "external_source": CUSTOMCAT_SOURCE,
        "external_id": external_id,
        "product_metadata": metadata,
    }


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def extract_product_colors(metadata: Any) -> List[str]:
    if not isinstance(metadata, dict):
        return []
    candidates = (
        (metadata.get("colors"), ("color_name", "name")),
        (_as_dict(metadata.get("customcat_original")).get("colors"), ("color_name", "name")),
        (_as_dict(metadata.get("customcat_original")).get("product_colors"), ("color_name",)),
        (_as_dict(metadata.get("customcat_data")).get("product_colors"), ("color_name",)),
    )
    for colors, keys in candidates:
        if isinstance(colors, list):
            names = [
                next((c.get(k) for k in keys if c.get(k)), "")
                for c in colors
                if isinstance(c, dict)
            ]
            return [n for n in names if n]
    return []
