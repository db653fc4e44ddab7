import pytest

pytest.importorskip("ortools")

from grid import Grid  # noqa: E402
from items import build_item_list  # noqa: E402
from models import INFEASIBLE, SOLVED  # noqa: E402
from solver.cp_sat import try_pack_cp_sat  # noqa: E402


def test_cp_sat_finds_a_disjoint_layout():
    grid = Grid(2, 3, [(1, 0)])
    items = build_item_list({"1x2": 1, "2x1": 1, "1x1": 1})

    status, placed, reason = try_pack_cp_sat(grid, items, max_seconds=5.0)

    assert status == SOLVED, reason
    assert [p.item_id for p in placed] == [1, 2, 3]
    covered = set()
    for p in placed:
        cells = set(p.cells())
        assert not cells & covered
        assert (1, 0) not in cells
        covered |= cells
    assert len(covered) == 5
    # the model only reads the grid
    assert grid.empty_count() == 5


def test_cp_sat_proves_shape_infeasibility():
    grid = Grid(2, 3)
    items = build_item_list({"3x1": 1, "1x2": 1, "1x1": 1})

    status, placed, _reason = try_pack_cp_sat(grid, items, max_seconds=5.0)

    assert status == INFEASIBLE
    assert placed == []


def test_item_without_any_anchor_short_circuits():
    status, placed, reason = try_pack_cp_sat(Grid(1, 4), build_item_list({"2x2": 1}), max_seconds=5.0)

    assert status == INFEASIBLE
    assert "2x2" in reason


def test_identical_items_take_distinct_anchors():
    grid = Grid(2, 2)
    status, placed, _ = try_pack_cp_sat(grid, build_item_list({"1x1": 4}), max_seconds=5.0)

    assert status == SOLVED
    assert {(p.row, p.col) for p in placed} == {(0, 0), (0, 1), (1, 0), (1, 1)}
