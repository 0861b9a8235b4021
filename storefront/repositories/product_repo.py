from typing import Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from storefront.models.catalog_product import CatalogProduct


class ProductRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, product_id: int) -> Optional[CatalogProduct]:
        return self.db.get(CatalogProduct, product_id)

    def get_by_external_id(self, source: str, external_id: str) -> Optional[CatalogProduct]:
        return (
            self.db.query(CatalogProduct)
            .filter(
                CatalogProduct.external_source == source,
                CatalogProduct.external_id == str(external_id),
            )
            .first()
        )

    def list(
        self,
        category: Optional[str] = None,
        featured: Optional[bool] = None,
        page: int = 1,
        size: int = 50,
    ) -> Tuple[List[CatalogProduct], int]:
        query = self.db.query(CatalogProduct).filter(CatalogProduct.is_available == True)
        if category:
            query = query.filter(func.lower(CatalogProduct.category) == category.lower())
        if featured is not None:
            query = query.filter(CatalogProduct.is_featured == featured)
        total = query.with_entities(func.count()).scalar() or 0
        items = (
            query.order_by(CatalogProduct.name, CatalogProduct.id)
            .offset((page - 1) * size)
            .limit(size)
            .all()
        )
        return items, total

    def count(self, source: Optional[str] = None) -> int:
        query = self.db.query(func.count(CatalogProduct.id))
        if source is not None:
            query = query.filter(CatalogProduct.external_source == source)
        return query.scalar() or 0

    def create(self, fields: Dict) -> CatalogProduct:
        p = CatalogProduct(**fields)
        self.db.add(p)
        self.db.flush()
        return p

    def update(self, product: CatalogProduct, fields: Dict) -> CatalogProduct:
        for name, value in fields.items():
            setattr(product, name, value)
        self.db.flush()
        return product
