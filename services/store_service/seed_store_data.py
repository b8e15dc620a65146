"""Seed script for store demo data.

Creates a small catalog so the checkout and order validation flow can be
exercised end-to-end.

Usage:
    python -m services.store_service.seed_store_data [--create-tables]
"""

import argparse
import asyncio
from decimal import Decimal

from libs.db.base import Base
from libs.db.config import AsyncSessionLocal, engine
from services.store_service.models import Product, ProductCategory
from sqlalchemy import func, select

DEMO_PRODUCTS = [
    {
        "name": "Oversized Tee Black",
        "slug": "oversized-tee-black",
        "description": "Heavyweight cotton oversized tee with a dropped shoulder.",
        "category": ProductCategory.TSHIRTS,
        "price": Decimal("129.90"),
        "old_price": Decimal("159.90"),
        "images": ["https://cdn.zonastreet.test/products/oversized-tee-black.jpg"],
        "sizes": ["P", "M", "G", "GG"],
        "stock": 25,
        "is_new_drop": True,
        "is_featured": True,
    },
    {
        "name": "Box Logo Hoodie",
        "slug": "box-logo-hoodie",
        "description": "Brushed fleece hoodie with an embroidered box logo.",
        "category": ProductCategory.HOODIES,
        "price": Decimal("289.90"),
        "images": ["https://cdn.zonastreet.test/products/box-logo-hoodie.jpg"],
        "sizes": ["M", "G", "GG", "XG"],
        "stock": 12,
        "is_featured": True,
    },
    {
        "name": "Cargo Pants Olive",
        "slug": "cargo-pants-olive",
        "description": "Relaxed ripstop cargo pants with six pockets.",
        "category": ProductCategory.PANTS,
        "price": Decimal("249.90"),
        "images": ["https://cdn.zonastreet.test/products/cargo-pants-olive.jpg"],
        "sizes": ["P", "M", "G"],
        "stock": 8,
        "is_new_drop": True,
    },
    {
        "name": "Coach Jacket",
        "slug": "coach-jacket",
        "description": "Water-resistant nylon coach jacket with snap front.",
        "category": ProductCategory.JACKETS,
        "price": Decimal("349.90"),
        "images": ["https://cdn.zonastreet.test/products/coach-jacket.jpg"],
        "sizes": ["M", "G", "GG"],
        "stock": 5,
    },
    {
        "name": "Five Panel Cap",
        "slug": "five-panel-cap",
        "description": "Unstructured five panel cap with adjustable strap.",
        "category": ProductCategory.ACCESSORIES,
        "price": Decimal("89.90"),
        "images": ["https://cdn.zonastreet.test/products/five-panel-cap.jpg"],
        "sizes": ["M"],
        "stock": 30,
    },
]


async def seed_store_data(create_tables: bool = False):
    if create_tables:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        print("Seeding store data...")

        count = (await db.execute(select(func.count(Product.id)))).scalar()
        if count:
            print(f"Store data already exists ({count} products). Skipping seed.")
            return

        db.add_all(Product(**data) for data in DEMO_PRODUCTS)
        await db.commit()

        print("=" * 60)
        print("Store data seeded successfully!")
        print(f"  Products: {len(DEMO_PRODUCTS)}")
        print("=" * 60)

    await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed demo store products")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create tables first (local SQLite runs without migrations)",
    )
    args = parser.parse_args()
    asyncio.run(seed_store_data(create_tables=args.create_tables))
