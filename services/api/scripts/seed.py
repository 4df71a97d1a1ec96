#!/usr/bin/env python3
"""Seed database with sample catalog data.

Creates:
- Scrubs with color x size stock matrices
- Accessories with a single scalar stock (no variants)
- One bundle deal

Seed script is idempotent (products and deals are matched by slug).

Usage:
    cd services/api
    python -m scripts.seed
"""

import asyncio
import os
import sys

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from medwear.models import Deal, DealItem, Product
from medwear.services.deals import slugify
from medwear.services.inventory import Dimension, VariantInventory
from medwear.services.pricing import round_money
from medwear.services.products import generate_barcode, store_inventory
from medwear.services.variant_codec import encode_images
from medwear.settings import get_settings

load_dotenv()

# ============================================================
# Product Definitions
# ============================================================
# stock: either an int (scalar) or {color: {size: qty}} (matrix)

SAMPLE_PRODUCTS = [
    {
        "name": "Classic V-Neck Scrub Top",
        "category": "Scrubs",
        "company": "Medwear",
        "cost_price": 1400,
        "price": 2800,
        "sale_price": 2450,
        "customization_price": 350,
        "images": ["https://cdn.medwear.example/scrubs/vneck-navy-front.jpg"],
        "colors": ["Navy", "Wine", "Ceil Blue"],
        "sizes": ["XS", "S", "M", "L", "XL"],
        "stock": {
            "Navy": {"XS": 2, "S": 8, "M": 12, "L": 9, "XL": 3},
            "Wine": {"XS": 0, "S": 4, "M": 6, "L": 5, "XL": 1},
            "Ceil Blue": {"XS": 1, "S": 3, "M": 0, "L": 2, "XL": 0},
        },
        "color_images": {
            "Navy": ["https://cdn.medwear.example/scrubs/vneck-navy-front.jpg"],
            "Wine": ["https://cdn.medwear.example/scrubs/vneck-wine-front.jpg"],
        },
    },
    {
        "name": "Jogger Scrub Pants",
        "category": "Scrubs",
        "company": "Medwear",
        "cost_price": 1500,
        "price": 3000,
        "sale_price": None,
        "customization_price": None,
        "images": ["https://cdn.medwear.example/scrubs/jogger-black.jpg"],
        "colors": ["Black", "Navy"],
        "sizes": ["S", "M", "L"],
        "stock": {
            "Black": {"S": 5, "M": 7, "L": 4},
            "Navy": {"S": 2, "M": 6, "L": 0},
        },
        "color_images": {},
    },
    {
        "name": "Embroidered Lab Coat",
        "category": "Lab Coats",
        "company": "Medwear",
        "cost_price": 2600,
        "price": 4800,
        "sale_price": None,
        "customization_price": 500,
        "images": ["https://cdn.medwear.example/coats/lab-coat-white.jpg"],
        "colors": [],
        "sizes": ["S", "M", "L", "XL"],
        "stock": 14,
        "color_images": {},
    },
    {
        "name": "Dual-Head Stethoscope",
        "category": "Accessories",
        "company": "Cardio Line",
        "cost_price": 3200,
        "price": 5200,
        "sale_price": 4900,
        "customization_price": None,
        "images": ["https://cdn.medwear.example/accessories/stethoscope.jpg"],
        "colors": [],
        "sizes": [],
        "stock": 9,
        "color_images": {},
    },
    {
        "name": "Retractable Badge Reel",
        "category": "Accessories",
        "company": "Medwear",
        "cost_price": 120,
        "price": 450,
        "sale_price": None,
        "customization_price": None,
        "images": ["https://cdn.medwear.example/accessories/badge-reel.jpg"],
        "colors": [],
        "sizes": [],
        "stock": 60,
        "color_images": {},
    },
]

SAMPLE_DEAL = {
    "name": "Scrub Set Starter Bundle",
    "description": "V-neck top and jogger pants together.",
    "deal_price": 4900,
    "items": [("classic-v-neck-scrub-top", 1), ("jogger-scrub-pants", 1)],
}


def build_inventory(definition: dict) -> VariantInventory:
    """Build the inventory through the same operations the editor uses."""
    inventory = VariantInventory()
    for color in definition["colors"]:
        inventory.add_dimension_value(Dimension.COLOR, color)
    for size in definition["sizes"]:
        inventory.add_dimension_value(Dimension.SIZE, size)

    stock = definition["stock"]
    if isinstance(stock, dict):
        for color, row in stock.items():
            for size, qty in row.items():
                inventory.set_cell(color, size, qty)
    else:
        inventory.set_scalar_stock(stock)

    for color, images in definition["color_images"].items():
        for image in images:
            inventory.toggle_color_image(color, image)
    return inventory


async def seed_database() -> None:
    """Seed database with sample data."""
    database_url = get_settings().async_database_url

    engine = create_async_engine(database_url, echo=False)
    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as session:
        print("🌱 Seeding database...")

        print("\n👕 Creating Products...")
        product_map = await seed_products(session)

        print("\n🎁 Creating Deals...")
        await seed_deal(session, product_map)

        await session.commit()
        print("\n✅ Database seeded successfully!")

    await engine.dispose()


async def seed_products(session: AsyncSession) -> dict[str, Product]:
    """Seed products. Returns slug -> Product."""
    product_map: dict[str, Product] = {}

    for definition in SAMPLE_PRODUCTS:
        slug = slugify(definition["name"])
        result = await session.execute(select(Product).where(Product.slug == slug))
        existing = result.scalar_one_or_none()

        if existing:
            product_map[slug] = existing
            print(f"  ⏭️  {slug} (exists)")
            continue

        product = Product(
            name=definition["name"],
            slug=slug,
            category_name=definition["category"],
            company=definition["company"],
            cost_price=definition["cost_price"],
            price=definition["price"],
            sale_price=definition["sale_price"],
            customization_price=definition["customization_price"],
            barcode=generate_barcode(),
            images=encode_images(definition["images"]),
            is_active=True,
        )
        inventory = build_inventory(definition)
        store_inventory(product, inventory)
        session.add(product)
        await session.flush()
        product_map[slug] = product
        print(f"  ✅ {slug} ({product.barcode}, stock={product.stock})")

    return product_map


async def seed_deal(session: AsyncSession, product_map: dict[str, Product]) -> None:
    slug = slugify(SAMPLE_DEAL["name"])
    result = await session.execute(select(Deal).where(Deal.slug == slug))
    if result.scalar_one_or_none():
        print(f"  ⏭️  {slug} (exists)")
        return

    items = [(product_map[s], qty) for s, qty in SAMPLE_DEAL["items"] if s in product_map]
    if len(items) < 2:
        print(f"  ⚠️  Not enough products for {slug}")
        return

    original_price = round_money(sum((p.sale_price or p.price) * qty for p, qty in items))
    deal = Deal(
        name=SAMPLE_DEAL["name"],
        slug=slug,
        description=SAMPLE_DEAL["description"],
        deal_price=SAMPLE_DEAL["deal_price"],
        original_price=original_price,
        is_active=True,
        items=[DealItem(product_id=p.id, quantity=qty, position=pos) for pos, (p, qty) in enumerate(items)],
    )
    session.add(deal)
    print(f"  ✅ {slug} ({SAMPLE_DEAL['deal_price']} instead of {original_price})")


if __name__ == "__main__":
    asyncio.run(seed_database())
