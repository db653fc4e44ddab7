import logging
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

from ortools.sat.python import cp_model as _cp

from config import CFG
from grid import Grid
from models import INFEASIBLE, SOLVED, TIMED_OUT, ItemInstance, Placement

log = logging.getLogger(__name__)


def _anchors_for(grid: Grid, item: ItemInstance) -> List[Tuple[int, int]]:
    return [
        (r, c)
        for r in range(grid.rows)
        for c in range(grid.cols)
        if grid.can_place(item.height, item.width, r, c)
    ]


def try_pack_cp_sat(
    grid: Grid,
    items: Sequence[ItemInstance],
    max_seconds: Optional[float] = None,
) -> Tuple[str, List[Placement], str]:
    """Exact placement model over the grid's Empty cells.

    Returns ``(status, placements, reason)`` where status is ``SOLVED``,
    ``INFEASIBLE`` (proven) or ``TIMED_OUT``. The grid is only read.
    Placements come back in item-list order.
    """
    if max_seconds is None:
        max_seconds = float(getattr(CFG, "CP_SAT_SECONDS", 10.0))

    if not items:
        return SOLVED, [], "Nothing to place"

    options: List[List[Tuple[int, int]]] = []
    for item in items:
        anchors = _anchors_for(grid, item)
        if not anchors:
            return INFEASIBLE, [], f"No anchor fits item #{item.id} ({item.type})"
        options.append(anchors)

    m = _cp.CpModel()
    n = len(items)
    p = [[m.NewBoolVar(f"p_{i}_{k}") for k in range(len(options[i]))] for i in range(n)]
    for i in range(n):
        m.AddExactlyOne(p[i])

    # identical items are interchangeable: keep their chosen anchors ordered
    place_idx = []
    for i in range(n):
        idx = m.NewIntVar(0, len(options[i]) - 1, f"idx_{i}")
        m.Add(idx == sum(k * p[i][k] for k in range(len(options[i]))))
        place_idx.append(idx)
    by_type: Dict[str, List[int]] = defaultdict(list)
    for i, item in enumerate(items):
        by_type[item.type].append(i)
    for idxs in by_type.values():
        for a, b in zip(idxs, idxs[1:]):
            m.Add(place_idx[a] < place_idx[b])

    cell_to_vars: Dict[Tuple[int, int], List] = defaultdict(list)
    for i, item in enumerate(items):
        for k, (r, c) in enumerate(options[i]):
            for dr in range(item.height):
                for dc in range(item.width):
                    cell_to_vars[(r + dr, c + dc)].append(p[i][k])
    for vars_here in cell_to_vars.values():
        if len(vars_here) > 1:
            m.AddAtMostOne(vars_here)

    solver = _cp.CpSolver()
    solver.parameters.max_time_in_seconds = float(max_seconds)
    solver.parameters.max_memory_in_mb = int(getattr(CFG, "MAX_MEMORY_MB", 1024))
    solver.parameters.num_search_workers = int(getattr(CFG, "WORKERS", 1))
    solver.parameters.log_search_progress = False

    res = solver.Solve(m)
    log.debug("cp-sat status %s", solver.StatusName(res))

    if res in (_cp.OPTIMAL, _cp.FEASIBLE):
        placed: List[Placement] = []
        for i, item in enumerate(items):
            for k, (r, c) in enumerate(options[i]):
                if solver.BooleanValue(p[i][k]):
                    placed.append(Placement(item.id, item.type, r, c, item.height, item.width))
                    break
        return SOLVED, placed, "Solved by CP-SAT"
    if res == _cp.INFEASIBLE:
        return INFEASIBLE, [], "Proven infeasible by CP-SAT"
    if res == _cp.MODEL_INVALID:
        return TIMED_OUT, [], "Model invalid (configuration error)"
    return TIMED_OUT, [], "Stopped before solution (timebox)"
