# Orchestrator: validate -> grid -> precheck -> item list -> backtracking (-> CP-SAT rescue) -> projection
from __future__ import annotations

import logging
import time
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from config import CFG
from grid import Grid
from items import build_item_list, quantity_area, validate_quantities
from models import (
    INFEASIBLE,
    INSUFFICIENT_SPACE,
    SOLVED,
    TIMED_OUT,
    ItemInstance,
    SolveResult,
)
from progress import (
    log_attempt_detail,
    set_item_count,
    set_nodes,
    set_phase,
    set_placed,
    set_progress_pct,
    set_strategy,
)
from solver.backtrack import backtrack_place
from solver.projector import project_grid

log = logging.getLogger(__name__)

REASONS = {
    SOLVED: "Placement found",
    INSUFFICIENT_SPACE: "Total item area exceeds the available space",
    INFEASIBLE: "No feasible arrangement found",
    TIMED_OUT: "Stopped before solution (search budget)",
}


def check_capacity(grid: Grid, quantities: Mapping[str, int]) -> Tuple[bool, int, int]:
    """Area-only precheck on ``{type: count}``: ``(fits, required, available)``.

    Passing it says nothing about shapes; the search still decides.
    """
    available = grid.empty_count()
    required = quantity_area(quantities)
    return required <= available, required, available


def _deadline_from(time_limit: Optional[float], t0: float) -> Optional[float]:
    if time_limit is None:
        time_limit = float(getattr(CFG, "TIME_LIMIT", 0) or 0)
    if time_limit and time_limit > 0:
        return t0 + float(time_limit)
    return None


def _run_cp_sat_rescue(grid: Grid, items: Sequence[ItemInstance]):
    from solver.cp_sat import try_pack_cp_sat

    try:
        return try_pack_cp_sat(grid, items, float(getattr(CFG, "CP_SAT_SECONDS", 10.0)))
    except Exception as exc:
        log.exception("cp-sat rescue failed")
        return TIMED_OUT, [], f"CP-SAT rescue exception: {type(exc).__name__}: {exc}"


def solve(
    quantities: Mapping[str, Any],
    blocked: Optional[Iterable[Tuple[int, int]]] = None,
    *,
    rows: Optional[int] = None,
    cols: Optional[int] = None,
    node_limit: Optional[int] = None,
    time_limit: Optional[float] = None,
) -> SolveResult:
    """
    Place every requested item on the board or say why not.

    ``blocked`` defaults to ``CFG.DEFAULT_BLOCKED``; pass an empty iterable for
    an open board. Bad quantities raise ``InvalidQuantity`` before any search.
    Returns a ``SolveResult`` whose status is one of solved /
    insufficient_space / infeasible / timed_out.
    """
    t0 = time.time()
    clean = validate_quantities(quantities)
    # expanded only once the area check passes
    items: List[ItemInstance] = []

    rows = int(rows if rows is not None else CFG.ROWS)
    cols = int(cols if cols is not None else CFG.COLS)
    grid = Grid(rows, cols, CFG.DEFAULT_BLOCKED if blocked is None else blocked)
    if node_limit is None:
        node_limit = int(getattr(CFG, "NODE_LIMIT", 0) or 0)

    set_item_count(sum(clean.values()))
    log_attempt_detail(
        "Solve requested",
        board=f"{rows}×{cols}",
        blocked=grid.blocked_count(),
        items=sum(clean.values()),
        node_limit=node_limit,
    )

    def _finish(status: str, *, placements=None, strategy: str = "", nodes: int = 0,
                reason: Optional[str] = None, **meta: Any) -> SolveResult:
        ok = status == SOLVED
        result = SolveResult(
            ok=ok,
            status=status,
            reason=reason or REASONS[status],
            rows=rows,
            cols=cols,
            items=list(items),
            placements=list(placements or []) if ok else [],
            grid=project_grid(grid) if ok else None,
            strategy=strategy,
            nodes=nodes,
            elapsed_sec=time.time() - t0,
            meta=meta,
        )
        set_nodes(nodes)
        set_placed(len(result.placements))
        set_phase("")
        log_attempt_detail(
            "Solve finished",
            status=status,
            strategy=strategy,
            nodes=nodes,
            placed=len(result.placements),
            elapsed=round(result.elapsed_sec, 3),
        )
        return result

    set_phase("precheck")
    fits, required, available = check_capacity(grid, clean)
    if not fits:
        return _finish(
            INSUFFICIENT_SPACE,
            reason=f"{REASONS[INSUFFICIENT_SPACE]} ({required} cells needed, {available} free)",
            required=required,
            available=available,
        )
    set_progress_pct(10)
    items = build_item_list(clean)

    set_phase("backtracking")
    set_strategy("backtracking")
    outcome = backtrack_place(
        grid,
        items,
        node_limit=node_limit,
        deadline=_deadline_from(time_limit, t0),
    )
    set_progress_pct(90)

    if outcome.status == TIMED_OUT and getattr(CFG, "CP_SAT_RESCUE", False):
        set_phase("cp-sat")
        set_strategy("cp-sat")
        status, placed, reason = _run_cp_sat_rescue(grid, items)
        log_attempt_detail("CP-SAT rescue", status=status, reason=reason)
        if status == SOLVED:
            for p in placed:
                grid.place(p.item_id, p.height, p.width, p.row, p.col)
        return _finish(
            status,
            placements=placed,
            strategy="cp-sat",
            nodes=outcome.nodes,
            reason=reason if status != SOLVED else None,
            required=required,
            available=available,
            rescue=True,
        )

    return _finish(
        outcome.status,
        placements=outcome.placements,
        strategy="backtracking",
        nodes=outcome.nodes,
        required=required,
        available=available,
    )


__all__: List[str] = ["solve", "check_capacity", "REASONS"]
