"""POS search box: suggestions and barcode scans.

The same input serves a person typing and a hardware scanner that types the
code and presses Enter. On Enter:
1. a highlighted suggestion wins;
2. otherwise, if the text looks like a barcode, look it up on the server;
3. otherwise, a single remaining suggestion is taken;
4. otherwise nothing matches.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from enum import Enum

from medwear.services.catalog import CatalogProduct

logger = logging.getLogger("uvicorn.error")

MAX_SUGGESTIONS = 8
_GENERIC_BARCODE = re.compile(r"^[A-Z0-9]{6,}$")


def looks_like_barcode(text: str, prefix: str = "DP") -> bool:
    """In-house prefix followed by alphanumerics, or 6+ alphanumerics."""
    candidate = (text or "").strip().upper()
    if not candidate:
        return False
    if prefix and re.fullmatch(rf"{re.escape(prefix.upper())}[A-Z0-9]+", candidate):
        return True
    return bool(_GENERIC_BARCODE.fullmatch(candidate))


def suggest(products: Sequence[CatalogProduct], term: str, limit: int = MAX_SUGGESTIONS) -> list[CatalogProduct]:
    """Products whose name, category, company, barcode or sku contains the term."""
    term = (term or "").strip()
    if not term:
        return []
    lower = term.lower()
    upper = term.upper()

    def matches(p: CatalogProduct) -> bool:
        return (
            lower in p.name.lower()
            or (p.category_name is not None and lower in p.category_name.lower())
            or (p.company is not None and lower in p.company.lower())
            or (p.barcode is not None and upper in p.barcode.upper())
            or (p.sku is not None and upper in p.sku.upper())
        )

    return [p for p in products if matches(p)][:limit]


class ScanSource(Enum):
    SUGGESTION = "suggestion"
    BARCODE = "barcode"
    SINGLE_MATCH = "single_match"
    NONE = "none"


@dataclass(frozen=True)
class ScanResult:
    product: CatalogProduct | None
    source: ScanSource
    message: str | None = None


BarcodeLookup = Callable[[str], Awaitable[CatalogProduct | None]]


async def resolve_enter(
    text: str,
    products: Sequence[CatalogProduct],
    lookup: BarcodeLookup,
    *,
    selected_index: int | None = None,
    barcode_prefix: str = "DP",
) -> ScanResult:
    """Resolve the search box content when Enter is pressed."""
    suggestions = suggest(products, text)

    if selected_index is not None and 0 <= selected_index < len(suggestions):
        return ScanResult(suggestions[selected_index], ScanSource.SUGGESTION)

    code = (text or "").strip()
    if code and looks_like_barcode(code, barcode_prefix):
        product = await lookup(code)
        if product is not None:
            return ScanResult(product, ScanSource.BARCODE, f"Found: {product.name}")
        logger.info(f"Barcode lookup miss: {code}")
        return ScanResult(None, ScanSource.NONE, "Product not found for this barcode")

    if len(suggestions) == 1:
        return ScanResult(suggestions[0], ScanSource.SINGLE_MATCH)

    if code and not suggestions:
        return ScanResult(None, ScanSource.NONE, "No products found")
    return ScanResult(None, ScanSource.NONE)
