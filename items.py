# items.py: item catalog, quantity parsing and the ordered item list
from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from models import InvalidQuantity, ItemInstance, ItemType

# type name -> (height, width); shapes are never rotated
ITEM_SHAPES: Dict[str, Tuple[int, int]] = {
    "1x1": (1, 1),
    "1x2": (2, 1),
    "1x3": (3, 1),
    "2x1": (1, 2),
    "3x1": (1, 3),
    "2x2": (2, 2),
}

ITEM_TYPES: Dict[str, ItemType] = {
    name: ItemType(name, h, w) for name, (h, w) in ITEM_SHAPES.items()
}

# Accept keys like 1x1, item_1x1, qty_2x2, count[3x1], 2×2 ...
_ANY_KEY_TYPE_RE = re.compile(r"(?P<a>\d+)\s*[xX×]\s*(?P<b>\d+)")
_COUNT_RE = re.compile(r"^\+?\d+$")


def _to_count(raw: Any, type_name: str) -> int:
    if isinstance(raw, (list, tuple)):
        raw = raw[0] if raw else None
    if raw is None:
        raise InvalidQuantity(f"missing quantity for {type_name}")
    if isinstance(raw, bool):
        raise InvalidQuantity(f"quantity for {type_name} must be an integer, got {raw!r}")
    if isinstance(raw, int):
        n = raw
    elif isinstance(raw, float):
        if not raw.is_integer():
            raise InvalidQuantity(f"quantity for {type_name} must be an integer, got {raw!r}")
        n = int(raw)
    elif isinstance(raw, str):
        s = raw.strip()
        if s == "":
            raise InvalidQuantity(f"missing quantity for {type_name}")
        if s.startswith("-") and _COUNT_RE.match(s[1:]):
            raise InvalidQuantity(f"quantity for {type_name} must not be negative, got {s}")
        if not _COUNT_RE.match(s):
            raise InvalidQuantity(f"quantity for {type_name} must be an integer, got {s!r}")
        n = int(s)
    else:
        raise InvalidQuantity(f"quantity for {type_name} must be an integer, got {raw!r}")
    if n < 0:
        raise InvalidQuantity(f"quantity for {type_name} must not be negative, got {n}")
    return n


def validate_quantities(quantities: Mapping[str, Any]) -> Dict[str, int]:
    """Return a clean ``{type: count}`` copy, raising ``InvalidQuantity`` on bad input."""
    if not isinstance(quantities, Mapping):
        raise InvalidQuantity(f"expected a mapping of item type to count, got {type(quantities).__name__}")
    out: Dict[str, int] = {}
    for name, raw in quantities.items():
        if name not in ITEM_SHAPES:
            raise InvalidQuantity(f"unknown item type {name!r}")
        out[name] = _to_count(raw, name)
    return out


def _iter_items(form_like: Any) -> Iterable[Tuple[Any, Any]]:
    if isinstance(form_like, Mapping):
        yield from form_like.items()
    elif hasattr(form_like, "items"):
        yield from form_like.items()


def parse_quantities(form_like: Any) -> Dict[str, int]:
    """
    Pull ``{type: count}`` out of a JSON body or form mapping.

    A nested ``quantities`` mapping wins when present; otherwise every key
    carrying an ``AxB`` token is read as a quantity field. Keys without such a
    token (``blocked``, submit buttons, ...) are ignored. Repeated types are
    summed in first-seen order.
    """
    if not form_like:
        return {}

    if isinstance(form_like, Mapping) and isinstance(form_like.get("quantities"), Mapping):
        return validate_quantities(form_like["quantities"])

    bag: Dict[str, int] = {}
    for k, v in _iter_items(form_like):
        m = _ANY_KEY_TYPE_RE.search(str(k))
        if not m:
            continue
        name = f"{int(m.group('a'))}x{int(m.group('b'))}"
        if name not in ITEM_SHAPES:
            raise InvalidQuantity(f"unknown item type {name!r}")
        bag[name] = bag.get(name, 0) + _to_count(v, name)
    return bag


def build_item_list(quantities: Mapping[str, int]) -> List[ItemInstance]:
    """Expand quantities into item instances, largest footprint first.

    Types of equal area follow catalog order, whatever order the request
    lists them in. Ids count up from 1 across the sorted traversal.
    """
    catalog = list(ITEM_SHAPES)
    groups = []
    for name, count in quantities.items():
        shape = ITEM_TYPES.get(name)
        if shape is None:
            raise InvalidQuantity(f"unknown item type {name!r}")
        groups.append((shape, int(count)))
    groups.sort(key=lambda g: (-g[0].area, catalog.index(g[0].name)))

    items: List[ItemInstance] = []
    next_id = 1
    for shape, count in groups:
        for _ in range(count):
            items.append(ItemInstance(next_id, shape.name, shape.height, shape.width))
            next_id += 1
    return items


def quantity_area(quantities: Mapping[str, int]) -> int:
    """Cells needed by ``{type: count}`` without expanding it into instances."""
    total = 0
    for name, count in quantities.items():
        shape = ITEM_TYPES.get(name)
        if shape is None:
            raise InvalidQuantity(f"unknown item type {name!r}")
        total += shape.area * int(count)
    return total


def fmt_quantities(quantities: Mapping[str, int]) -> List[Tuple[str, int]]:
    return [(name, int(quantities[name])) for name in ITEM_SHAPES if quantities.get(name)]
