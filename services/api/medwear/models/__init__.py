"""SQLAlchemy ORM models.

Models represent database tables:
- products: Catalog with JSON-encoded variant fields
- pos_sales / pos_sale_items: In-store sales
- orders / order_items: Storefront COD orders
- deals / deal_items: Product bundles
"""

from medwear.models.product import Product
from medwear.models.sale import PosSale, PosSaleItem
from medwear.models.order import Order, OrderItem
from medwear.models.deal import Deal, DealItem

__all__ = ["Product", "PosSale", "PosSaleItem", "Order", "OrderItem", "Deal", "DealItem"]
