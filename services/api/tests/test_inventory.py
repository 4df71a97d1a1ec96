import pytest

from medwear.services.inventory import (
    Dimension,
    InventoryError,
    VariantInventory,
    coerce_quantity,
    stock_status,
)


def _black_white() -> VariantInventory:
    return VariantInventory.decode(
        sizes='["S", "M"]',
        colors='["Black", "White"]',
        color_images='{"Black": ["black.jpg"], "White": "white.jpg"}',
        color_size_stock='{"Black": {"S": 2, "M": 0}, "White": {"S": 0, "M": 5}}',
        stock=0,
    )


def _cells_sum(inv: VariantInventory) -> int:
    return sum(qty for row in inv.color_size_stock.values() for qty in row.values())


def test_matrix_cell_gates_availability() -> None:
    inv = _black_white()
    assert inv.use_variant_stock
    assert inv.available("Black", "M") == 0
    assert inv.available("White", "M") == 5
    assert inv.available("Black") == 2
    assert inv.total_stock() == 7


def test_legacy_single_color_image_is_wrapped_in_list() -> None:
    inv = _black_white()
    assert inv.color_images == {"Black": ["black.jpg"], "White": ["white.jpg"]}


def test_total_stock_tracks_cells_through_edits() -> None:
    inv = _black_white()

    assert inv.add_dimension_value(Dimension.COLOR, "Red")
    assert inv.color_size_stock["Red"] == {"S": 0, "M": 0}
    inv.set_cell("Red", "S", 3)
    assert inv.total_stock() == _cells_sum(inv) == 10

    assert inv.add_dimension_value("size", "L")
    assert all(row["L"] == 0 for row in inv.color_size_stock.values())
    inv.set_cell("White", "L", "4")
    assert inv.total_stock() == _cells_sum(inv) == 14

    inv.remove_dimension_value(Dimension.SIZE, "S")
    assert inv.total_stock() == _cells_sum(inv) == 9
    assert inv.stock == 9


def test_removing_color_cascades_to_matrix_and_images() -> None:
    inv = _black_white()
    inv.add_dimension_value(Dimension.COLOR, "Red")
    inv.set_cell("Red", "M", 2)
    inv.toggle_color_image("Red", "red.jpg")

    assert inv.remove_dimension_value(Dimension.COLOR, "Red")
    assert "Red" not in inv.color_size_stock
    assert "Red" not in inv.color_images
    assert "Red" not in inv.colors
    assert inv.total_stock() == 7


def test_removing_last_size_clears_matrix() -> None:
    inv = _black_white()
    inv.remove_dimension_value(Dimension.SIZE, "S")
    inv.remove_dimension_value(Dimension.SIZE, "M")

    assert not inv.use_variant_stock
    assert inv.color_size_stock == {}
    assert inv.total_stock() == 0
    assert inv.colors == ["Black", "White"]


def test_remove_absent_value_is_noop() -> None:
    inv = _black_white()
    assert not inv.remove_dimension_value(Dimension.COLOR, "Green")
    assert inv.total_stock() == 7


def test_add_duplicate_or_blank_value_is_ignored() -> None:
    inv = _black_white()
    assert not inv.add_dimension_value(Dimension.SIZE, "M")
    assert not inv.add_dimension_value(Dimension.SIZE, "   ")
    assert inv.sizes == ["S", "M"]


@pytest.mark.parametrize("bad", [-1, "abc", 2.5, True, float("nan"), None])
def test_set_cell_rejects_invalid_quantities(bad) -> None:
    inv = _black_white()
    with pytest.raises(InventoryError):
        inv.set_cell("White", "M", bad)
    assert inv.cell_stock("White", "M") == 5


def test_set_cell_requires_known_variant() -> None:
    inv = _black_white()
    with pytest.raises(InventoryError):
        inv.set_cell("Green", "M", 1)
    with pytest.raises(InventoryError):
        inv.set_cell("White", "XXL", 1)


def test_set_cell_needs_both_dimensions() -> None:
    inv = VariantInventory(sizes=["S", "M"], stock=4)
    with pytest.raises(InventoryError):
        inv.set_cell("Black", "S", 1)


def test_scalar_stock_is_derived_when_matrix_exists() -> None:
    inv = _black_white()
    with pytest.raises(InventoryError):
        inv.set_scalar_stock(50)

    plain = VariantInventory()
    assert plain.set_scalar_stock("12") == 12
    assert plain.total_stock() == 12


def test_coerce_quantity() -> None:
    assert coerce_quantity("7") == 7
    assert coerce_quantity(3.0) == 3
    assert coerce_quantity(0) == 0
    with pytest.raises(InventoryError):
        coerce_quantity(-3)


def test_decrement_and_restore_cell() -> None:
    inv = _black_white()
    inv.decrement("White", "M", 2)
    assert inv.cell_stock("White", "M") == 3
    assert inv.stock == 5

    with pytest.raises(InventoryError, match="Only 3 in stock"):
        inv.decrement("White", "M", 4)
    assert inv.cell_stock("White", "M") == 3

    inv.restore("White", "M", 2)
    assert inv.cell_stock("White", "M") == 5
    assert inv.stock == 7


def test_decrement_scalar_stock() -> None:
    inv = VariantInventory(stock=3)
    inv.decrement(None, None, 3)
    assert inv.total_stock() == 0
    with pytest.raises(InventoryError):
        inv.decrement(None, None, 1)


def test_encode_syncs_stock_and_drops_empty_fields() -> None:
    inv = _black_white()
    inv.stock = 999
    encoded = inv.encode()
    assert encoded["stock"] == 7
    assert encoded["sizes"] == '["S", "M"]'

    plain = VariantInventory(stock=4).encode()
    assert plain["sizes"] is None
    assert plain["color_size_stock"] is None
    assert plain["stock"] == 4


def test_stock_status_labels() -> None:
    assert stock_status(0) == "Out of Stock"
    assert stock_status(3) == "Low: 3"
    assert stock_status(5) == "Low: 5"
    assert stock_status(6) == "6 in stock"
    assert stock_status(8, low_threshold=10) == "Low: 8"
