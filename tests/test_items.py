import pytest

from items import (
    ITEM_SHAPES,
    build_item_list,
    fmt_quantities,
    parse_quantities,
    quantity_area,
    validate_quantities,
)
from models import InvalidQuantity


def test_catalog_footprints_are_height_by_width():
    assert ITEM_SHAPES == {
        "1x1": (1, 1),
        "1x2": (2, 1),
        "1x3": (3, 1),
        "2x1": (1, 2),
        "3x1": (1, 3),
        "2x2": (2, 2),
    }


def test_build_item_list_sorts_by_area_and_numbers_from_one():
    items = build_item_list({"1x1": 2, "2x2": 1, "1x3": 1})

    assert [it.type for it in items] == ["2x2", "1x3", "1x1", "1x1"]
    assert [it.id for it in items] == [1, 2, 3, 4]
    assert (items[0].height, items[0].width) == (2, 2)
    assert (items[1].height, items[1].width) == (3, 1)


def test_build_item_list_breaks_area_ties_by_catalog_order():
    a = build_item_list({"2x1": 1, "1x2": 1})
    b = build_item_list({"1x2": 1, "2x1": 1})

    assert [it.type for it in a] == ["1x2", "2x1"]
    assert [it.type for it in b] == ["1x2", "2x1"]
    assert [it.id for it in a] == [1, 2]

    c = build_item_list({"3x1": 2, "1x3": 1, "2x2": 1})
    assert [it.type for it in c] == ["2x2", "1x3", "3x1", "3x1"]


def test_quantity_area_counts_cells_without_expanding():
    assert quantity_area({"2x2": 2, "1x3": 1, "1x1": 0}) == 11
    assert quantity_area({"1x1": 3_000_000}) == 3_000_000
    with pytest.raises(InvalidQuantity):
        quantity_area({"4x4": 1})


def test_build_item_list_skips_zero_counts():
    assert build_item_list({"1x1": 0, "2x2": 0}) == []


def test_validate_quantities_accepts_numeric_strings():
    assert validate_quantities({"1x1": "3", "2x2": 0, "3x1": 2.0}) == {"1x1": 3, "2x2": 0, "3x1": 2}


@pytest.mark.parametrize("bad", ["-1", -2, "abc", "", None, 1.5, True, "2.5"])
def test_validate_quantities_rejects_bad_counts(bad):
    with pytest.raises(InvalidQuantity):
        validate_quantities({"1x1": bad})


def test_validate_quantities_rejects_unknown_type():
    with pytest.raises(InvalidQuantity):
        validate_quantities({"4x4": 1})


def test_parse_quantities_reads_form_style_keys():
    form = {
        "item_1x1": ["2"],
        "qty_2x2": "1",
        "blocked": ["0,0"],
        "submit": "Go",
    }

    assert parse_quantities(form) == {"1x1": 2, "2x2": 1}


def test_parse_quantities_prefers_nested_mapping():
    payload = {"quantities": {"3x1": 1}, "item_1x1": "5"}

    assert parse_quantities(payload) == {"3x1": 1}


def test_parse_quantities_sums_repeated_types():
    assert parse_quantities({"1x1": 1, "item_1x1": "2"}) == {"1x1": 3}


def test_parse_quantities_rejects_unknown_size_key():
    with pytest.raises(InvalidQuantity):
        parse_quantities({"item_5x5": "1"})


def test_fmt_quantities_follows_catalog_order():
    assert fmt_quantities({"2x2": 1, "1x1": 3, "3x1": 0}) == [("1x1", 3), ("2x2", 1)]
