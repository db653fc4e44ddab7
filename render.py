from html import escape
from typing import Dict, List, Optional, Sequence

from config import CFG
from models import BLOCKED, EMPTY, Placement

COLORS = ["red", "blue", "green", "yellow", "purple", "orange", "pink"]
BLOCKED_FILL = "gray"


def _color(item_id: int) -> str:
    return COLORS[item_id % len(COLORS)]


def render_grid(snapshot: Sequence[Sequence[int]], placements: Optional[List[Placement]] = None,
                cell_px: Optional[int] = None):
    """SVG for a projected grid plus an HTML legend (one entry per placement)."""
    scale = int(cell_px or CFG.CELL_PX)
    rows = len(snapshot)
    cols = len(snapshot[0]) if rows else 0
    svg_w = cols * scale + 2
    svg_h = rows * scale + 2

    cells = []
    for r, row in enumerate(snapshot):
        for c, value in enumerate(row):
            x = c * scale + 1
            y = r * scale + 1
            if value == BLOCKED:
                fill = BLOCKED_FILL
            elif value == EMPTY:
                fill = "white"
            else:
                fill = _color(value)
            cells.append(
                f'<rect x="{x}" y="{y}" width="{scale}" height="{scale}" fill="{fill}" stroke="black" stroke-width="1"/>'
            )
            if value not in (BLOCKED, EMPTY):
                cells.append(
                    f'<text x="{x + scale // 2}" y="{y + scale // 2}" font-size="12" fill="black" '
                    f'text-anchor="middle" dominant-baseline="middle">{value}</text>'
                )
    frame = f'<rect x="1" y="1" width="{svg_w - 2}" height="{svg_h - 2}" fill="none" stroke="black" stroke-width="2"/>'
    svg = (
        f'<svg class="layout-svg" xmlns="http://www.w3.org/2000/svg" '
        f'width="{svg_w}" height="{svg_h}" '
        f'viewBox="0 0 {svg_w} {svg_h}" preserveAspectRatio="xMinYMin meet">'
        f'{"".join(cells)}{frame}</svg>'
    )

    palette: Dict[int, str] = {}
    for p in placements or []:
        palette.setdefault(p.item_id, escape(p.type))
    legend = "".join(
        f"<li><span class='swatch' style='background:{_color(i)}'></span>#{i} {t}</li>"
        for i, t in palette.items()
    )
    return svg, legend
