"""Variant inventory model.

A product's stock is either:
- a single scalar count (no variants, or only one dimension), or
- a color x size matrix when both `colors` and `sizes` are non-empty.

In matrix mode the scalar `stock` is derived (sum of all cells) and is
rewritten by `sync_stock()` before persisting; it is never read as ground
truth while cells exist. Removing a color or size cascades: its row/column
is deleted from the matrix and, for colors, from `color_images`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from medwear.services.variant_codec import (
    decode_color_images,
    decode_stock_matrix,
    decode_string_list,
    encode_list,
    encode_mapping,
)


class Dimension(str, Enum):
    """Variant dimension kinds."""

    COLOR = "color"
    SIZE = "size"


class InventoryError(ValueError):
    """Invalid inventory mutation (bad quantity, unknown variant, short stock)."""


def coerce_quantity(value: Any) -> int:
    """Coerce user input to a non-negative integer quantity.

    Raises:
        InventoryError: For negative, NaN, boolean or non-numeric input.
    """
    if isinstance(value, bool):
        raise InventoryError(f"Invalid quantity: {value!r}")
    if isinstance(value, str):
        value = value.strip()
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InventoryError(f"Invalid quantity: {value!r}") from None
    if number != number or number in (float("inf"), float("-inf")):
        raise InventoryError(f"Invalid quantity: {value!r}")
    if number < 0:
        raise InventoryError("Quantity cannot be negative")
    if number != int(number):
        raise InventoryError("Quantity must be a whole number")
    return int(number)


@dataclass
class VariantInventory:
    """Stock bookkeeping for one product."""

    sizes: list[str] = field(default_factory=list)
    colors: list[str] = field(default_factory=list)
    color_images: dict[str, list[str]] = field(default_factory=dict)
    color_size_stock: dict[str, dict[str, int]] = field(default_factory=dict)
    stock: int = 0

    # ------------------------------------------------------------
    # Modes
    # ------------------------------------------------------------

    @property
    def use_variant_stock(self) -> bool:
        """True when both dimensions exist, i.e. the editor shows the matrix."""
        return len(self.colors) > 0 and len(self.sizes) > 0

    @property
    def has_variants(self) -> bool:
        """True when the product needs a size and/or color chosen before sale."""
        return len(self.colors) > 0 or len(self.sizes) > 0

    @property
    def tracks_variant_stock(self) -> bool:
        """True when at least one matrix row exists."""
        return len(self.color_size_stock) > 0

    # ------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------

    def total_stock(self) -> int:
        """Sum of all cells when a matrix exists, else the scalar stock."""
        if self.tracks_variant_stock:
            return sum(sum(row.values()) for row in self.color_size_stock.values())
        return self.stock

    def color_total(self, color: str) -> int:
        """Sum across all sizes for a color; 0 if the color has no row."""
        return sum(self.color_size_stock.get(color, {}).values())

    def size_total(self, size: str) -> int:
        """Sum across all colors for a size."""
        return sum(row.get(size, 0) for row in self.color_size_stock.values())

    def cell_stock(self, color: str, size: str) -> int:
        """Quantity at an exact (color, size); 0 if absent."""
        return self.color_size_stock.get(color, {}).get(size, 0)

    def available(self, color: str | None = None, size: str | None = None) -> int:
        """Stock that gates a sale of the given variant.

        With a matrix, a full (color, size) selection reads that cell and a
        color-only selection reads the color total. Without one, the scalar
        stock is authoritative regardless of the selection.
        """
        if self.tracks_variant_stock:
            if color and size:
                return self.cell_stock(color, size)
            if color:
                return self.color_total(color)
            if size:
                return self.size_total(size)
        return self.total_stock()

    # ------------------------------------------------------------
    # Editor mutations
    # ------------------------------------------------------------

    def set_cell(self, color: str, size: str, quantity: Any) -> int:
        """Set the quantity of one (color, size) cell.

        Returns:
            The stored (coerced) quantity.

        Raises:
            InventoryError: If the quantity is invalid or the variant is unknown.
        """
        qty = coerce_quantity(quantity)
        if not self.use_variant_stock:
            raise InventoryError("Variant stock needs at least one color and one size")
        if color not in self.colors:
            raise InventoryError(f"Unknown color: {color}")
        if size not in self.sizes:
            raise InventoryError(f"Unknown size: {size}")

        self.color_size_stock.setdefault(color, {})[size] = qty
        return qty

    def set_scalar_stock(self, quantity: Any) -> int:
        """Set the scalar stock used when no matrix exists."""
        qty = coerce_quantity(quantity)
        if self.tracks_variant_stock:
            raise InventoryError("Stock is derived from color/size quantities")
        self.stock = qty
        return qty

    def add_dimension_value(self, kind: Dimension | str, value: str) -> bool:
        """Append a color or size; duplicates and blanks are ignored.

        When both dimensions are non-empty afterwards, the new row/column is
        zero-filled against every value of the other dimension.

        Returns:
            True if the value was added.
        """
        kind = Dimension(kind)
        value = (value or "").strip()
        if not value:
            return False

        values = self.colors if kind is Dimension.COLOR else self.sizes
        if value in values:
            return False
        values.append(value)

        if self.use_variant_stock:
            if kind is Dimension.COLOR:
                row = self.color_size_stock.setdefault(value, {})
                for size in self.sizes:
                    row.setdefault(size, 0)
            else:
                for color in self.colors:
                    self.color_size_stock.setdefault(color, {}).setdefault(value, 0)
        return True

    def remove_dimension_value(self, kind: Dimension | str, value: str) -> bool:
        """Remove a color or size and every cell keyed by it.

        Removing a color also drops its `color_images` entry. If the matrix
        mode ends (one dimension became empty) the matrix is cleared.

        Returns:
            True if the value was present.
        """
        kind = Dimension(kind)
        had_matrix = self.tracks_variant_stock

        if kind is Dimension.COLOR:
            present = value in self.colors
            self.colors = [c for c in self.colors if c != value]
            self.color_size_stock.pop(value, None)
            self.color_images.pop(value, None)
        else:
            present = value in self.sizes
            self.sizes = [s for s in self.sizes if s != value]
            for row in self.color_size_stock.values():
                row.pop(value, None)

        self.prune()
        if had_matrix:
            # Removed cells take their units with them.
            self.stock = sum(sum(row.values()) for row in self.color_size_stock.values())
        return present

    def toggle_color_image(self, color: str, image_url: str) -> list[str]:
        """Add or remove an image from a color's image list."""
        if color not in self.colors:
            raise InventoryError(f"Unknown color: {color}")
        current = self.color_images.get(color, [])
        if image_url in current:
            updated = [u for u in current if u != image_url]
        else:
            updated = [*current, image_url]
        self.color_images[color] = updated
        return updated

    def prune(self) -> None:
        """Drop cells and images keyed by values no longer in the dimension lists."""
        self.color_images = {c: imgs for c, imgs in self.color_images.items() if c in self.colors}
        if not self.use_variant_stock:
            self.color_size_stock = {}
            return
        self.color_size_stock = {
            color: {size: qty for size, qty in row.items() if size in self.sizes}
            for color, row in self.color_size_stock.items()
            if color in self.colors
        }

    def sync_stock(self) -> int:
        """Rewrite the scalar stock from the matrix (no-op without one)."""
        if self.tracks_variant_stock:
            self.stock = self.total_stock()
        return self.stock

    # ------------------------------------------------------------
    # Sale bookkeeping
    # ------------------------------------------------------------

    def decrement(self, color: str | None, size: str | None, quantity: int) -> None:
        """Take `quantity` units out of the variant's stock.

        Raises:
            InventoryError: If fewer than `quantity` units are available.
        """
        if quantity <= 0:
            raise InventoryError("Quantity must be positive")
        available = self.available(color, size)
        if quantity > available:
            raise InventoryError(f"Only {available} in stock")

        if self.tracks_variant_stock and color and size:
            self.color_size_stock[color][size] = self.cell_stock(color, size) - quantity
            self.sync_stock()
        else:
            self.stock -= quantity

    def restore(self, color: str | None, size: str | None, quantity: int) -> None:
        """Put units back (sale deleted / returned)."""
        if quantity <= 0:
            return
        if self.tracks_variant_stock and color and size and color in self.color_size_stock:
            row = self.color_size_stock[color]
            if size in row:
                row[size] += quantity
                self.sync_stock()
                return
        if not self.tracks_variant_stock:
            self.stock += quantity

    # ------------------------------------------------------------
    # Serialization boundary
    # ------------------------------------------------------------

    @classmethod
    def decode(
        cls,
        *,
        sizes: Any = None,
        colors: Any = None,
        color_images: Any = None,
        color_size_stock: Any = None,
        stock: Any = 0,
    ) -> "VariantInventory":
        """Build from persisted JSON-string fields (never raises)."""
        try:
            scalar = max(0, int(stock or 0))
        except (TypeError, ValueError):
            scalar = 0
        return cls(
            sizes=decode_string_list(sizes, "sizes"),
            colors=decode_string_list(colors, "colors"),
            color_images=decode_color_images(color_images),
            color_size_stock=decode_stock_matrix(color_size_stock),
            stock=scalar,
        )

    def encode(self) -> dict[str, Any]:
        """Encode to persisted field values, with stock synced."""
        self.prune()
        self.sync_stock()
        return {
            "sizes": encode_list(self.sizes),
            "colors": encode_list(self.colors),
            "color_images": encode_mapping(self.color_images),
            "color_size_stock": encode_mapping(self.color_size_stock),
            "stock": self.total_stock(),
        }


def stock_status(stock: int, low_threshold: int = 5) -> str:
    """Human label for a stock count."""
    if stock <= 0:
        return "Out of Stock"
    if stock <= low_threshold:
        return f"Low: {stock}"
    return f"{stock} in stock"
