import pytest

from config import CFG
from grid import Grid, parse_blocked
from models import BLOCKED, EMPTY, InvalidBlockedCell


def test_default_board_has_ten_blocked_cells():
    grid = Grid(CFG.ROWS, CFG.COLS, CFG.DEFAULT_BLOCKED)

    assert (grid.rows, grid.cols) == (7, 6)
    assert grid.blocked_count() == 10
    assert grid.empty_count() == 32
    assert grid.cell(0, 0) == BLOCKED
    assert grid.cell(0, 1) == EMPTY


def test_out_of_range_blocked_cells_are_ignored():
    grid = Grid(2, 2, [(0, 0), (5, 5), (-1, 0), (1, 2)])

    assert grid.blocked == {(0, 0)}
    assert grid.blocked_count() == 1


def test_can_place_checks_bounds_and_cells():
    grid = Grid(3, 3, [(1, 1)])

    assert grid.can_place(1, 2, 0, 0)
    assert not grid.can_place(2, 2, 0, 0)   # covers the blocked centre
    assert not grid.can_place(1, 2, 0, 2)   # runs off the right edge
    assert not grid.can_place(3, 1, 1, 0)   # runs off the bottom
    assert grid.can_place(3, 1, 0, 2)


def test_place_and_remove_restore_the_grid():
    grid = Grid(3, 3, [(2, 2)])
    before = grid.snapshot()

    grid.place(7, 2, 2, 0, 0)
    assert grid.snapshot() == [[7, 7, 0], [7, 7, 0], [0, 0, -1]]
    assert grid.occupied_count() == 4
    assert not grid.can_place(1, 1, 1, 1)
    assert grid.empty_count() + grid.occupied_count() + grid.blocked_count() == grid.size

    grid.remove(2, 2, 0, 0)
    assert grid.snapshot() == before


def test_non_positive_dimensions_raise():
    with pytest.raises(ValueError):
        Grid(0, 3)


def test_parse_blocked_accepts_pairs_and_strings():
    assert parse_blocked([(0, 0), [1, 2], "3, 4"]) == {(0, 0), (1, 2), (3, 4)}
    assert parse_blocked("0,0;6,5") == {(0, 0), (6, 5)}
    assert parse_blocked(None) == frozenset()


@pytest.mark.parametrize("bad", [["1"], [(1, 2, 3)], ["a,b"], [{"r": 1}]])
def test_parse_blocked_rejects_malformed_entries(bad):
    with pytest.raises(InvalidBlockedCell):
        parse_blocked(bad)
