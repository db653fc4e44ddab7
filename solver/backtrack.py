# solver/backtrack.py
import logging
import time
from typing import List, Optional, Sequence

from grid import Grid
from models import (
    EMPTY,
    INFEASIBLE,
    SOLVED,
    TIMED_OUT,
    ItemInstance,
    Placement,
    SearchOutcome,
)

log = logging.getLogger(__name__)


def backtrack_place(
    grid: Grid,
    items: Sequence[ItemInstance],
    *,
    node_limit: int = 0,
    deadline: Optional[float] = None,
) -> SearchOutcome:
    """Depth-first placement of ``items`` in list order.

    Each item is anchored (top-left) at Empty cells in row-major order. The
    first anchor that fits is committed and the next item is tried; when an
    item runs out of anchors the previous placement is undone and its scan
    resumes one cell further on. The first complete arrangement wins, so the
    result is fully determined by the grid and the item order.

    ``placements`` is both the answer and the undo log. ``resume`` holds, per
    committed item, the flat cell index its scan continues from after a
    backtrack, so no recursion is needed.

    Every committed placement costs one node. Hitting ``node_limit`` (when
    positive) or passing ``deadline`` aborts with ``TIMED_OUT``. On any
    failure the grid is handed back exactly as it came in.
    """
    t0 = time.time()
    cells = grid.cells
    cols = grid.cols
    total = grid.size
    n = len(items)

    placements: List[Placement] = []
    resume: List[int] = []
    nodes = 0
    idx = 0
    cursor = 0

    def _budget_exceeded() -> bool:
        if node_limit and node_limit > 0 and nodes >= node_limit:
            return True
        if deadline is not None and time.time() >= deadline:
            return True
        return False

    def _unwind() -> None:
        while placements:
            p = placements.pop()
            grid.remove(p.height, p.width, p.row, p.col)
        resume.clear()

    while True:
        if idx == n:
            elapsed = time.time() - t0
            log.debug("backtracking solved %d items in %d nodes (%.3fs)", n, nodes, elapsed)
            return SearchOutcome(SOLVED, list(placements), nodes, elapsed)

        item = items[idx]
        h, w = item.height, item.width
        committed = False
        pos = cursor
        while pos < total:
            if cells[pos] == EMPTY:
                r, c = divmod(pos, cols)
                if grid.can_place(h, w, r, c):
                    if _budget_exceeded():
                        _unwind()
                        elapsed = time.time() - t0
                        log.info("backtracking stopped after %d nodes (%.3fs)", nodes, elapsed)
                        return SearchOutcome(TIMED_OUT, [], nodes, elapsed)
                    grid.place(item.id, h, w, r, c)
                    placements.append(Placement(item.id, item.type, r, c, h, w))
                    resume.append(pos + 1)
                    nodes += 1
                    committed = True
                    break
            pos += 1

        if committed:
            idx += 1
            cursor = 0
            continue

        # item ``idx`` has no anchor left under the current prefix
        if not placements:
            elapsed = time.time() - t0
            log.debug("backtracking exhausted after %d nodes (%.3fs)", nodes, elapsed)
            return SearchOutcome(INFEASIBLE, [], nodes, elapsed)
        last = placements.pop()
        grid.remove(last.height, last.width, last.row, last.col)
        cursor = resume.pop()
        idx -= 1
