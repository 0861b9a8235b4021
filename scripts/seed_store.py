#!/usr/bin/env python3
"""
Seed the store with a few manually managed merchandise products
(external_source is null, so catalog syncs never touch them).

Usage:
    python scripts/seed_store.py [--reset]
"""
import argparse
import os
import sys

# allow running from repo/scripts
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from storefront.db import SessionLocal, init_db
from storefront.models.catalog_product import CatalogProduct
from storefront.repositories.product_repo import ProductRepository

SEED_PRODUCTS = [
    {
        "name": "Tour T-Shirt",
        "description": "Soft cotton tee with this year's tour dates on the back.",
        "category": "Apparel",
        "price": "24.99",
        "image_url": "/images/store/tour-tee.jpg",
        "stock_quantity": 120,
        "is_featured": True,
    },
    {
        "name": "Festival Hoodie",
        "description": "Heavyweight pullover hoodie.",
        "category": "Apparel",
        "price": "49.99",
        "image_url": "/images/store/festival-hoodie.jpg",
        "stock_quantity": 40,
        "is_featured": True,
    },
    {
        "name": "Enamel Pin Set",
        "description": "Three collectible pins.",
        "category": "Accessories",
        "price": "12.50",
        "image_url": "/images/store/pin-set.jpg",
        "stock_quantity": 300,
        "is_featured": False,
    },
    {
        "name": "Signed Poster",
        "description": "Limited run, signed by the headliners.",
        "category": "Collectibles",
        "price": "35.00",
        "image_url": "/images/store/poster.jpg",
        "stock_quantity": 25,
        "is_featured": False,
    },
]


def seed(reset: bool = False) -> int:
    init_db(reset=reset)
    db = SessionLocal()
    repo = ProductRepository(db)
    created = 0
    try:
        for entry in SEED_PRODUCTS:
            exists = (
                db.query(CatalogProduct)
                .filter(CatalogProduct.name == entry["name"], CatalogProduct.external_source.is_(None))
                .first()
            )
            if exists:
                continue
            repo.create(entry)
            created += 1
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
    return created


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--reset", action="store_true", help="drop and recreate tables first")
    args = parser.parse_args()
    print("Seeded products:", seed(reset=args.reset))
