# solver/projector.py
from collections import Counter
from typing import Any, Dict, List, Sequence

from grid import Grid
from models import BLOCKED, EMPTY, Placement, SolveResult


def project_grid(grid: Grid) -> List[List[int]]:
    """Row lists of ``-1`` (blocked), ``0`` (empty) or the occupying item id."""
    return grid.snapshot()


def occupancy_by_item(snapshot: Sequence[Sequence[int]]) -> Dict[int, int]:
    counts: Counter = Counter()
    for row in snapshot:
        for v in row:
            if v != BLOCKED and v != EMPTY:
                counts[v] += 1
    return dict(counts)


def _placement_dict(p: Placement) -> Dict[str, Any]:
    return {
        "id": p.item_id,
        "type": p.type,
        "row": p.row,
        "col": p.col,
        "height": p.height,
        "width": p.width,
    }


def result_payload(result: SolveResult) -> Dict[str, Any]:
    """JSON-ready view of a solve; failed solves carry no grid and no trace."""
    return {
        "ok": result.ok,
        "status": result.status,
        "reason": result.reason,
        "strategy": result.strategy,
        "rows": result.rows,
        "cols": result.cols,
        "grid": result.grid if result.ok else None,
        "placements": [_placement_dict(p) for p in result.placements] if result.ok else [],
        "item_count": len(result.items),
        "nodes": result.nodes,
        "elapsed_str": result.elapsed_str(),
        "meta": dict(result.meta),
    }
