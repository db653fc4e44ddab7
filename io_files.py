"""Helpers for writing solver outputs to disk."""

from __future__ import annotations

import os
from typing import List, Optional

from config import CFG
from models import Placement


def _resolve_output_path(base_dir: str, configured_name: str, fallback: str) -> str:
    """Return the absolute path where an output artifact should be written."""

    name = (configured_name or "").strip() or fallback
    if os.path.isabs(name):
        return name
    return os.path.join(base_dir, name)


def write_coords(placed: List[Placement], base_dir: str) -> str:
    """Write the placement trace, one item per line, to the configured text file."""

    path = _resolve_output_path(base_dir, CFG.COORDS_OUT, "coords.txt")
    os.makedirs(os.path.dirname(path), exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        if not placed:
            f.write("No solution\n")
        else:
            for p in placed:
                f.write(f"#{p.item_id} {p.type} @ ({p.row},{p.col}) size ({p.height}×{p.width})\n")
    return path


def layout_view_html(svg: str, legend_html: str, *, title: str = "Layout View",
                     note: Optional[str] = None) -> str:
    note_html = f"<p class='note'>{note}</p>" if note else ""
    return f"""<!doctype html>
<html><head><meta charset='utf-8'><title>{title}</title></head>
<body class='container'>
<h1>{title}</h1>{note_html}
<section class='card'><div class='gridwrap'>{svg}</div></section>
<section class='card'><h3>Legend</h3><ul>{legend_html}</ul></section>
</body></html>"""


def write_layout_view_html(svg: str, legend_html: str, base_dir: str, *, note: Optional[str] = None) -> str:
    """Write the rendered SVG/legend preview to the configured HTML file."""

    path = _resolve_output_path(base_dir, CFG.LAYOUT_HTML, "layout_view.html")
    os.makedirs(os.path.dirname(path), exist_ok=True)

    with open(path, "w", encoding="utf-8") as vf:
        vf.write(layout_view_html(svg, legend_html, note=note))
    return path


__all__ = ["write_coords", "write_layout_view_html", "layout_view_html"]
