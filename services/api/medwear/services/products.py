"""Product persistence and stock bookkeeping.

Sales and orders lock the product rows they touch (SELECT ... FOR UPDATE),
re-check stock per variant against the decoded `VariantInventory`, and write
the decremented matrix plus the re-derived scalar stock back in the same
transaction.
"""

import logging
import random
import string
import time
from dataclasses import dataclass
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from medwear.models import Product
from medwear.schemas import ProductUpdate
from medwear.services.catalog import CatalogProduct
from medwear.services.deals import slugify
from medwear.services.inventory import InventoryError, VariantInventory
from medwear.settings import get_settings
from medwear.stores.postgres import get_session
from medwear.stores.redis import get_catalog_cache, invalidate_catalog_cache, set_catalog_cache

logger = logging.getLogger("uvicorn.error")


class ProductNotFoundError(LookupError):
    def __init__(self, product_id: str):
        super().__init__(f"Product not found: {product_id}")
        self.product_id = product_id


class InsufficientStockError(RuntimeError):
    """Requested quantity exceeds the variant's stock at commit time."""

    def __init__(self, product_name: str, available: int, size: str | None = None, color: str | None = None):
        variant = "/".join(v for v in (color, size) if v)
        label = f"{product_name} ({variant})" if variant else product_name
        super().__init__(f"Insufficient stock for {label}: only {available} available")
        self.product_name = product_name
        self.available = available
        self.size = size
        self.color = color


class StockLineError(ValueError):
    """Line item cannot be applied to stock as submitted."""


@dataclass
class StockLine:
    """One variant quantity to take out of (or put back into) stock."""

    product_id: str
    quantity: int
    size: str | None = None
    color: str | None = None


# ============================================================
# Serialization
# ============================================================


def serialize_product(product: Product) -> dict[str, Any]:
    """Wire shape (camelCase, JSON-string variant fields)."""
    return {
        "id": product.id,
        "name": product.name,
        "slug": product.slug,
        "description": product.description,
        "categoryName": product.category_name,
        "price": product.price,
        "salePrice": product.sale_price,
        "costPrice": product.cost_price or 0,
        "customizationPrice": product.customization_price,
        "barcode": product.barcode,
        "sku": product.sku,
        "company": product.company,
        "stock": product.stock or 0,
        "images": product.images or "[]",
        "sizes": product.sizes,
        "colors": product.colors,
        "colorImages": product.color_images,
        "colorSizeStock": product.color_size_stock,
        "isActive": product.is_active,
    }


def load_inventory(product: Product) -> VariantInventory:
    return VariantInventory.decode(
        sizes=product.sizes,
        colors=product.colors,
        color_images=product.color_images,
        color_size_stock=product.color_size_stock,
        stock=product.stock,
    )


def store_inventory(product: Product, inventory: VariantInventory) -> None:
    encoded = inventory.encode()
    product.sizes = encoded["sizes"]
    product.colors = encoded["colors"]
    product.color_images = encoded["color_images"]
    product.color_size_stock = encoded["color_size_stock"]
    product.stock = encoded["stock"]


# ============================================================
# Reads
# ============================================================


async def list_active_products() -> list[dict[str, Any]]:
    """Active catalog, served from Redis when cached."""
    try:
        cached = await get_catalog_cache()
        if cached is not None:
            return cached
    except RuntimeError:
        pass

    async with get_session() as session:
        result = await session.execute(
            select(Product).where(Product.is_active.is_(True)).order_by(Product.created_at.desc())
        )
        products = [serialize_product(p) for p in result.scalars().all()]

    logger.info(f"Catalog cache MISS, loaded {len(products)} products")
    try:
        await set_catalog_cache(products)
    except RuntimeError:
        pass
    return products


async def get_product(product_id: str) -> dict[str, Any] | None:
    async with get_session() as session:
        product = await session.get(Product, product_id)
        return serialize_product(product) if product else None


async def get_product_by_code(code: str) -> dict[str, Any] | None:
    """Exact match on barcode or sku (case-insensitive)."""
    code = code.strip().upper()
    if not code:
        return None
    async with get_session() as session:
        result = await session.execute(
            select(Product)
            .where(or_(Product.barcode == code, Product.sku == code))
            .limit(1)
        )
        product = result.scalar_one_or_none()
        return serialize_product(product) if product else None


# ============================================================
# Writes
# ============================================================


async def update_product(product_id: str, data: ProductUpdate) -> dict[str, Any]:
    """Persist the full product shape.

    Variant fields are decoded defensively, values dropped from sizes/colors
    are cascaded out of the matrix and colour images, and the scalar stock is
    re-derived when a matrix is in use.

    Raises:
        ProductNotFoundError: Unknown id.
        ProductValidationError: Required fields missing or invalid.
    """
    incoming = data.model_dump(by_alias=True, exclude_unset=True)

    async with get_session() as session:
        result = await session.execute(select(Product).where(Product.id == product_id).with_for_update())
        product = result.scalar_one_or_none()
        if product is None:
            raise ProductNotFoundError(product_id)

        merged = {**serialize_product(product), **incoming}
        catalog = CatalogProduct.from_payload(merged)
        catalog.validate_for_save()
        payload = catalog.to_payload()

        product.name = catalog.name.strip()
        product.slug = incoming.get("slug") or product.slug or slugify(catalog.name)
        product.description = catalog.description
        product.category_name = catalog.category_name
        product.price = catalog.price
        product.sale_price = catalog.sale_price
        product.cost_price = catalog.cost_price
        product.customization_price = catalog.customization_price
        product.barcode = catalog.barcode.upper() if catalog.barcode else None
        product.sku = catalog.sku.upper() if catalog.sku else None
        product.company = catalog.company
        product.is_active = catalog.is_active
        product.images = payload["images"]
        store_inventory(product, catalog.inventory)

        await session.flush()
        serialized = serialize_product(product)

    await invalidate_catalog_cache()
    logger.info(f"Product updated: {product_id} stock={serialized['stock']}")
    return serialized


def generate_barcode(prefix: str | None = None) -> str:
    """<prefix><base36 millis><4 random>, e.g. DPLZ3K9Q2A7F4."""
    prefix = (prefix or get_settings().barcode_prefix).upper()
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=4))
    return f"{prefix}{to_base36(int(time.time() * 1000))}{suffix}"


def to_base36(value: int) -> str:
    digits = string.digits + string.ascii_uppercase
    if value == 0:
        return "0"
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(digits[rem])
    return "".join(reversed(out))


async def generate_missing_barcodes() -> list[tuple[str, str]]:
    """Assign a unique barcode to every product without one.

    Returns:
        (product_id, barcode) pairs that were assigned.
    """
    async with get_session() as session:
        existing_result = await session.execute(select(Product.barcode).where(Product.barcode.is_not(None)))
        taken = {b for b in existing_result.scalars().all() if b}

        result = await session.execute(
            select(Product).where(or_(Product.barcode.is_(None), Product.barcode == "")).with_for_update()
        )
        assigned = []
        for product in result.scalars().all():
            barcode = generate_barcode()
            while barcode in taken:
                barcode = generate_barcode()
            taken.add(barcode)
            product.barcode = barcode
            assigned.append((product.id, barcode))

    if assigned:
        await invalidate_catalog_cache()
        logger.info(f"Generated barcodes for {len(assigned)} products")
    return assigned


# ============================================================
# Stock (inside a caller's transaction)
# ============================================================


async def lock_products(session: AsyncSession, product_ids: list[str]) -> dict[str, Product]:
    """Lock product rows for the rest of the transaction.

    Raises:
        ProductNotFoundError: If any id is unknown.
    """
    ids = sorted(set(product_ids))
    result = await session.execute(select(Product).where(Product.id.in_(ids)).with_for_update())
    products = {p.id: p for p in result.scalars().all()}
    for product_id in ids:
        if product_id not in products:
            raise ProductNotFoundError(product_id)
    return products


def take_stock(products: dict[str, Product], lines: list[StockLine]) -> None:
    """Decrement stock for every line, or raise before writing anything.

    Raises:
        InsufficientStockError: First line that does not fit.
    """
    inventories = {pid: load_inventory(p) for pid, p in products.items()}
    for line in lines:
        inventory = inventories[line.product_id]
        if line.quantity < 1:
            raise StockLineError("Quantity must be at least 1")
        if inventory.tracks_variant_stock and not (line.color and line.size):
            raise StockLineError(f"Select size/color for {products[line.product_id].name}")
        try:
            inventory.decrement(line.color, line.size, line.quantity)
        except InventoryError:
            raise InsufficientStockError(
                products[line.product_id].name,
                inventory.available(line.color, line.size),
                size=line.size,
                color=line.color,
            ) from None

    for product_id, inventory in inventories.items():
        store_inventory(products[product_id], inventory)


def return_stock(products: dict[str, Product], lines: list[StockLine]) -> None:
    """Put units back (sale voided or returned)."""
    inventories = {pid: load_inventory(p) for pid, p in products.items()}
    for line in lines:
        inventory = inventories.get(line.product_id)
        if inventory is not None:
            inventory.restore(line.color, line.size, line.quantity)
    for product_id, inventory in inventories.items():
        store_inventory(products[product_id], inventory)
