import pytest

from medwear.services.catalog import CatalogProduct
from medwear.services.scanner import ScanSource, looks_like_barcode, resolve_enter, suggest

PRODUCTS = [
    CatalogProduct(id="1", name="V-Neck Scrub Top", category_name="Scrubs", company="Medwear", barcode="DPLZ3K9Q2A7F4"),
    CatalogProduct(id="2", name="Jogger Scrub Pants", category_name="Scrubs", company="Medwear", sku="JOG-001"),
    CatalogProduct(id="3", name="Stethoscope", category_name="Accessories", company="Cardio Line"),
]


@pytest.mark.parametrize(
    "text,expected",
    [
        ("DP12", True),
        ("  dplz3k9q2a7f4 ", True),
        ("8901234567890", True),
        ("ABC123", True),
        ("ABC12", False),
        ("scrub top", False),
        ("JOG-001", False),
        ("", False),
    ],
)
def test_looks_like_barcode(text: str, expected: bool) -> None:
    assert looks_like_barcode(text) is expected


def test_suggest_matches_name_category_company_and_codes() -> None:
    assert [p.id for p in suggest(PRODUCTS, "scrub")] == ["1", "2"]
    assert [p.id for p in suggest(PRODUCTS, "cardio")] == ["3"]
    assert [p.id for p in suggest(PRODUCTS, "jog-0")] == ["2"]
    assert [p.id for p in suggest(PRODUCTS, "dplz3")] == ["1"]
    assert suggest(PRODUCTS, "   ") == []


def test_suggest_limit() -> None:
    many = [CatalogProduct(id=str(i), name=f"Cap {i}") for i in range(20)]
    assert len(suggest(many, "cap")) == 8


@pytest.mark.asyncio
async def test_selected_suggestion_wins_without_lookup() -> None:
    async def lookup(code: str):
        raise AssertionError("barcode lookup should not run")

    result = await resolve_enter("scrub", PRODUCTS, lookup, selected_index=1)
    assert result.source is ScanSource.SUGGESTION
    assert result.product.id == "2"


@pytest.mark.asyncio
async def test_barcode_lookup_on_enter() -> None:
    calls: list[str] = []
    found = CatalogProduct(id="9", name="Badge Reel", barcode="DPX9")

    async def lookup(code: str):
        calls.append(code)
        return found if code == "DPX9" else None

    result = await resolve_enter("DPX9", PRODUCTS, lookup)
    assert result.source is ScanSource.BARCODE
    assert result.product is found
    assert calls == ["DPX9"]

    missing = await resolve_enter("DPNOPE", PRODUCTS, lookup)
    assert missing.product is None
    assert missing.message == "Product not found for this barcode"


@pytest.mark.asyncio
async def test_single_text_match_is_selected() -> None:
    async def lookup(code: str):
        return None

    result = await resolve_enter("steth", PRODUCTS, lookup)
    assert result.source is ScanSource.SINGLE_MATCH
    assert result.product.id == "3"

    ambiguous = await resolve_enter("scrub", PRODUCTS, lookup)
    assert ambiguous.product is None
    assert ambiguous.source is ScanSource.NONE
