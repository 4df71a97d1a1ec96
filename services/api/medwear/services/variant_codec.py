"""Encode/decode of JSON-string variant fields.

Products persist `images`, `sizes`, `colors`, `colorImages` and `colorSizeStock`
as JSON-encoded strings. This module is the only place those strings are
parsed or produced. Decoding never raises: malformed input is logged and
defaults to an empty list / mapping so one bad row cannot blank a page.
"""

from __future__ import annotations

import json
import logging
from typing import Any

logger = logging.getLogger("uvicorn.error")


def _loads(raw: Any, field: str) -> Any:
    if raw is None:
        return None
    if not isinstance(raw, str):
        # Already structured (e.g. a client that sent a real JSON array).
        return raw
    s = raw.strip()
    if not s:
        return None
    try:
        return json.loads(s)
    except (json.JSONDecodeError, TypeError, ValueError):
        logger.warning(f"Malformed JSON in variant field {field!r}: {s[:80]!r}")
        return None


def decode_string_list(raw: Any, field: str = "list") -> list[str]:
    """Decode a JSON array of strings, dropping blanks and duplicates (order kept)."""
    parsed = _loads(raw, field)
    if parsed is None:
        return []
    if not isinstance(parsed, list):
        logger.warning(f"Variant field {field!r} is not a list, ignoring")
        return []

    out: list[str] = []
    for item in parsed:
        if item is None:
            continue
        value = str(item).strip()
        if value and value not in out:
            out.append(value)
    return out


def decode_color_images(raw: Any) -> dict[str, list[str]]:
    """Decode colour -> image URLs.

    Legacy rows store a single URL string per colour; those are wrapped in a list.
    """
    parsed = _loads(raw, "colorImages")
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        logger.warning("Variant field 'colorImages' is not an object, ignoring")
        return {}

    out: dict[str, list[str]] = {}
    for color, value in parsed.items():
        if isinstance(value, list):
            out[str(color)] = [str(v) for v in value if v]
        elif value:
            out[str(color)] = [str(value)]
        else:
            out[str(color)] = []
    return out


def _coerce_quantity(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number or number < 0:  # NaN or negative
        return None
    return int(number)


def decode_stock_matrix(raw: Any) -> dict[str, dict[str, int]]:
    """Decode colour -> size -> quantity.

    Cells that are not non-negative numbers are dropped (read back as zero).
    """
    parsed = _loads(raw, "colorSizeStock")
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        logger.warning("Variant field 'colorSizeStock' is not an object, ignoring")
        return {}

    matrix: dict[str, dict[str, int]] = {}
    for color, row in parsed.items():
        if not isinstance(row, dict):
            logger.warning(f"Stock row for color {color!r} is not an object, ignoring")
            continue
        cells: dict[str, int] = {}
        for size, qty in row.items():
            coerced = _coerce_quantity(qty)
            if coerced is None:
                logger.warning(f"Invalid stock cell {color!r}/{size!r}={qty!r}, treating as 0")
                continue
            cells[str(size)] = coerced
        matrix[str(color)] = cells
    return matrix


def encode_list(values: list[str]) -> str | None:
    """Encode a list; empty lists persist as NULL."""
    return json.dumps(list(values)) if values else None


def encode_images(values: list[str]) -> str:
    """Encode the product image list (always present, possibly "[]")."""
    return json.dumps(list(values))


def encode_mapping(mapping: dict[str, Any]) -> str | None:
    """Encode a colour-keyed mapping; empty mappings persist as NULL."""
    return json.dumps(mapping) if mapping else None
