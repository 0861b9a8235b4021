from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.db import get_db
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.product_schema import CatalogProductOut
from storefront.services.customcat_products import extract_product_colors, process_product_images

router = APIRouter(prefix="/api/store/products", tags=["catalogue"])


def _to_dict(p):
    out = process_product_images(CatalogProductOut.model_validate(p).model_dump())
    out["colors"] = extract_product_colors(out.get("metadata"))
    return out


@router.get("", summary="List products")
def list_products(
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    items, total = ProductRepository(db).list(page=page, size=size)
    return {"items": [_to_dict(p) for p in items], "total": total}


@router.get("/featured", summary="List featured products")
def featured_products(limit: int = Query(8, ge=1, le=50), db: Session = Depends(get_db)):
    items, _ = ProductRepository(db).list(featured=True, size=limit)
    return [_to_dict(p) for p in items]


@router.get("/category/{category}", summary="List products in a category")
def products_by_category(category: str, db: Session = Depends(get_db)):
    items, _ = ProductRepository(db).list(category=category, size=200)
    return [_to_dict(p) for p in items]


@router.get("/{product_id}", summary="Get product by id")
def get_product(product_id: int, db: Session = Depends(get_db)):
    p = ProductRepository(db).get(product_id)
    if not p:
        raise HTTPException(status_code=404, detail="Product not found")
    return _to_dict(p)
