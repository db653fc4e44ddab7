from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# Cell states inside a Grid. Positive values are item ids.
BLOCKED = -1
EMPTY = 0

# Solve outcomes
SOLVED = "solved"
INSUFFICIENT_SPACE = "insufficient_space"
INFEASIBLE = "infeasible"
TIMED_OUT = "timed_out"


class InvalidInput(ValueError):
    """Caller input rejected before the solver runs."""


class InvalidQuantity(InvalidInput):
    pass


class InvalidBlockedCell(InvalidInput):
    pass


class SolveFailed(RuntimeError):
    def __init__(self, result: "SolveResult"):
        super().__init__(result.reason or result.status)
        self.result = result


@dataclass(frozen=True)
class ItemType:
    name: str
    height: int
    width: int

    @property
    def area(self) -> int:
        return self.height * self.width


@dataclass(frozen=True)
class ItemInstance:
    id: int
    type: str
    height: int
    width: int

    @property
    def area(self) -> int:
        return self.height * self.width


@dataclass(frozen=True)
class Placement:
    item_id: int
    type: str
    row: int
    col: int
    height: int = 1
    width: int = 1

    def cells(self):
        for dr in range(self.height):
            for dc in range(self.width):
                yield self.row + dr, self.col + dc

    def as_tuple(self):
        return (self.item_id, self.type, self.row, self.col)


@dataclass
class SearchOutcome:
    status: str
    placements: List[Placement]
    nodes: int = 0
    elapsed_sec: float = 0.0


@dataclass
class SolveResult:
    ok: bool
    status: str
    reason: Optional[str]
    rows: int
    cols: int
    items: List[ItemInstance] = field(default_factory=list)
    placements: List[Placement] = field(default_factory=list)
    grid: Optional[List[List[int]]] = None
    strategy: str = ""
    nodes: int = 0
    elapsed_sec: float = 0.0
    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def trace(self):
        return [p.as_tuple() for p in self.placements]

    def raise_for_status(self) -> "SolveResult":
        if not self.ok:
            raise SolveFailed(self)
        return self

    def elapsed_str(self) -> str:
        return f"{int(self.elapsed_sec // 60)}m {self.elapsed_sec % 60:.2f}s"
