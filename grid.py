# grid.py: fixed-size cell mask the placement search mutates in place
from __future__ import annotations

import logging
from typing import Any, FrozenSet, Iterable, List, Optional, Set, Tuple

from models import BLOCKED, EMPTY, InvalidBlockedCell

log = logging.getLogger(__name__)

Cell = Tuple[int, int]


def _coerce_cell(raw: Any) -> Cell:
    if isinstance(raw, str):
        parts = raw.split(",")
        if len(parts) != 2:
            raise InvalidBlockedCell(f"blocked cell must look like 'r,c', got {raw!r}")
        raw = parts
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise InvalidBlockedCell(f"blocked cell must be a (row, col) pair, got {raw!r}")
    try:
        r, c = (int(str(v).strip()) for v in raw)
    except ValueError:
        raise InvalidBlockedCell(f"blocked cell must hold integers, got {raw!r}") from None
    return r, c


def parse_blocked(raw: Any) -> FrozenSet[Cell]:
    """Accept ``[(r, c), ...]``, ``[[r, c], ...]``, ``["r,c", ...]`` or ``"r,c;r,c"``."""
    if raw is None:
        return frozenset()
    if isinstance(raw, str):
        raw = [chunk for chunk in raw.split(";") if chunk.strip()]
    return frozenset(_coerce_cell(item) for item in raw)


class Grid:
    """R×C board of cells: ``BLOCKED``, ``EMPTY`` or the id of the occupying item.

    Cells are stored row-major in a flat list; ``index = r * cols + c``.
    Blocked coordinates outside the board are dropped without error.
    """

    def __init__(self, rows: int, cols: int, blocked: Optional[Iterable[Cell]] = None):
        rows = int(rows)
        cols = int(cols)
        if rows <= 0 or cols <= 0:
            raise ValueError(f"grid dimensions must be positive, got {rows}×{cols}")
        self.rows = rows
        self.cols = cols
        self.cells: List[int] = [EMPTY] * (rows * cols)
        self.blocked: Set[Cell] = set()
        for r, c in blocked or ():
            if 0 <= r < rows and 0 <= c < cols:
                self.cells[r * cols + c] = BLOCKED
                self.blocked.add((r, c))
            else:
                log.debug("ignoring out-of-range blocked cell (%s, %s) on %d×%d grid", r, c, rows, cols)

    @property
    def size(self) -> int:
        return self.rows * self.cols

    def cell(self, r: int, c: int) -> int:
        return self.cells[r * self.cols + c]

    def is_empty(self, r: int, c: int) -> bool:
        return self.cells[r * self.cols + c] == EMPTY

    def can_place(self, height: int, width: int, r: int, c: int) -> bool:
        if r < 0 or c < 0 or r + height > self.rows or c + width > self.cols:
            return False
        cells = self.cells
        cols = self.cols
        for dr in range(height):
            base = (r + dr) * cols + c
            for dc in range(width):
                if cells[base + dc] != EMPTY:
                    return False
        return True

    def place(self, item_id: int, height: int, width: int, r: int, c: int) -> None:
        cols = self.cols
        for dr in range(height):
            base = (r + dr) * cols + c
            for dc in range(width):
                self.cells[base + dc] = item_id

    def remove(self, height: int, width: int, r: int, c: int) -> None:
        cols = self.cols
        for dr in range(height):
            base = (r + dr) * cols + c
            for dc in range(width):
                self.cells[base + dc] = EMPTY

    def empty_count(self) -> int:
        return self.cells.count(EMPTY)

    def blocked_count(self) -> int:
        return self.cells.count(BLOCKED)

    def occupied_count(self) -> int:
        return self.size - self.empty_count() - self.blocked_count()

    def snapshot(self) -> List[List[int]]:
        return [self.cells[r * self.cols:(r + 1) * self.cols] for r in range(self.rows)]

    def __repr__(self) -> str:
        return f"Grid({self.rows}×{self.cols}, blocked={len(self.blocked)}, empty={self.empty_count()})"
