# config.py
import os


def _parse_cells(raw: str):
    cells = []
    for chunk in (raw or "").split(";"):
        chunk = chunk.strip()
        if not chunk:
            continue
        r, c = chunk.split(",")
        cells.append((int(r), int(c)))
    return frozenset(cells)


# ======= Board =======
ROWS = int(os.getenv("GP_ROWS", "7"))
COLS = int(os.getenv("GP_COLS", "6"))

# Default blocked pattern used when a caller does not supply one.
DEFAULT_BLOCKED = _parse_cells(os.getenv(
    "GP_DEFAULT_BLOCKED",
    "0,0;2,1;3,1;4,1;3,2;3,3;2,4;3,4;4,4;6,5",
))

# ======= Backtracking budget =======
# 0 disables the corresponding guard.
NODE_LIMIT = int(os.getenv("GP_NODE_LIMIT", "5000000"))
TIME_LIMIT = float(os.getenv("GP_TIME_LIMIT", "30"))

# ======= CP-SAT rescue (only after the backtracker runs out of budget) =======
CP_SAT_RESCUE  = int(os.getenv("GP_CP_SAT_RESCUE", "1")) != 0
CP_SAT_SECONDS = float(os.getenv("GP_CP_SAT_SECONDS", "10"))
WORKERS        = int(os.getenv("GP_WORKERS", "1"))
MAX_MEMORY_MB  = int(os.getenv("GP_MAX_MEMORY_MB", "1024"))

# ======= Output names =======
COORDS_OUT  = os.getenv("GP_COORDS_OUT", "coords.txt")
LAYOUT_HTML = os.getenv("GP_LAYOUT_HTML", "layout_view.html")

# ======= Rendering =======
CELL_PX = int(os.getenv("GP_CELL_PX", "40"))


class CFG:
    ROWS = ROWS
    COLS = COLS
    DEFAULT_BLOCKED = DEFAULT_BLOCKED

    NODE_LIMIT = NODE_LIMIT
    TIME_LIMIT = TIME_LIMIT

    CP_SAT_RESCUE  = CP_SAT_RESCUE
    CP_SAT_SECONDS = CP_SAT_SECONDS
    WORKERS        = WORKERS
    MAX_MEMORY_MB  = MAX_MEMORY_MB

    COORDS_OUT  = COORDS_OUT
    LAYOUT_HTML = LAYOUT_HTML

    CELL_PX = CELL_PX


__all__ = ["CFG"]
