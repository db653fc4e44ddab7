# app.py: HTTP surface: blocked-cell editing, solve, result views, progress
from __future__ import annotations

import logging
import os
import threading
import time
from typing import Any, Dict, FrozenSet, Tuple

from flask import Flask, request, send_from_directory, jsonify, url_for

from config import CFG
from grid import Grid, parse_blocked
from io_files import layout_view_html, write_coords, write_layout_view_html
from items import fmt_quantities, parse_quantities
from models import InvalidInput, InvalidQuantity
from progress import (
    reset as progress_reset,
    as_json as progress_json,
    start_timer as progress_start,
    set_status, set_done, set_elapsed, set_result_url,
)
from render import render_grid
from solver.orchestrator import solve
from solver.projector import result_payload

log = logging.getLogger(__name__)

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


def _resolve_output_paths(configured: str, fallback: str) -> Tuple[str, str, str]:
    name = (configured or "").strip() or fallback
    if os.path.isabs(name):
        full_path = name
    else:
        full_path = os.path.abspath(os.path.join(BASE_DIR, name))
    directory = os.path.dirname(full_path) or BASE_DIR
    filename = os.path.basename(full_path) or fallback
    return full_path, directory, filename


_COORDS_FULL_PATH, COORDS_DIR, COORDS_FILENAME = _resolve_output_paths(
    CFG.COORDS_OUT, "coords.txt"
)
_LAYOUT_FULL_PATH, LAYOUT_DIR, LAYOUT_FILENAME = _resolve_output_paths(
    CFG.LAYOUT_HTML, "layout_view.html"
)

# UI-owned blocked cells; each solve receives a copy.
BLOCKED_LOCK = threading.Lock()
BLOCKED = set(CFG.DEFAULT_BLOCKED)

LAST_RESULT: Dict[str, Any] = {
    "ok": False,
    "status": "idle",
    "reason": "No solve yet.",
    "svg": "",
    "legend": "",
}

app = Flask(__name__)


@app.after_request
def _no_cache_progress(resp):
    if request.path == "/progress3":
        resp.headers["Cache-Control"] = "no-store, max-age=0"
        resp.headers["Pragma"] = "no-cache"
        resp.headers["Expires"] = "0"
    return resp


def current_blocked() -> FrozenSet[Tuple[int, int]]:
    with BLOCKED_LOCK:
        return frozenset(BLOCKED)


def _fmt_elapsed(seconds: float) -> str:
    if seconds < 1:
        return "0s"
    m, s = divmod(int(seconds), 60)
    if m == 0:
        return f"{s}s"
    h, m = divmod(m, 60)
    if h == 0:
        return f"{m}m {s}s"
    return f"{h}h {m}m {s}s"


def _merge_like_mapping() -> Dict[str, Any]:
    merged: Dict[str, Any] = {}
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        merged.update(payload)

    for k, v in request.form.to_dict(flat=False).items():
        merged.setdefault(k, v)
    for k, v in request.args.to_dict(flat=False).items():
        merged.setdefault(k, v)
    return merged


def _blocked_from_like(value: Any) -> FrozenSet[Tuple[int, int]]:
    # form posts arrive as lists of "r,c" / "r,c;r,c" strings
    if isinstance(value, list) and value and all(isinstance(v, str) for v in value):
        value = ";".join(value)
    return parse_blocked(value)


def _finalize_solver_progress(ok_flag: bool, reason: str) -> None:
    """Mark the run done; ``set_done`` maps the flag to Solved or Error."""
    set_done(ok_flag, reason=reason)


def _blocked_preview() -> Tuple[str, str]:
    grid = Grid(CFG.ROWS, CFG.COLS, current_blocked())
    return render_grid(grid.snapshot())


@app.route("/")
def index():
    svg, _legend = _blocked_preview()
    return layout_view_html(svg, "", title="Blocked cells")


@app.route("/blocked", methods=["GET"])
def blocked_list():
    return jsonify({
        "rows": CFG.ROWS,
        "cols": CFG.COLS,
        "blocked": sorted([r, c] for r, c in current_blocked()),
    })


@app.route("/blocked/toggle", methods=["POST"])
def blocked_toggle():
    like = _merge_like_mapping()
    try:
        row = int(like["row"][0] if isinstance(like.get("row"), list) else like["row"])
        col = int(like["col"][0] if isinstance(like.get("col"), list) else like["col"])
    except (KeyError, TypeError, ValueError):
        return jsonify({"ok": False, "reason": "row and col must be integers"}), 400
    if not (0 <= row < CFG.ROWS and 0 <= col < CFG.COLS):
        return jsonify({"ok": False, "reason": f"cell ({row}, {col}) is outside the grid"}), 400
    with BLOCKED_LOCK:
        if (row, col) in BLOCKED:
            BLOCKED.discard((row, col))
            now_blocked = False
        else:
            BLOCKED.add((row, col))
            now_blocked = True
    return jsonify({"ok": True, "row": row, "col": col, "blocked": now_blocked})


@app.route("/blocked/reset", methods=["POST"])
def blocked_reset():
    with BLOCKED_LOCK:
        BLOCKED.clear()
        BLOCKED.update(CFG.DEFAULT_BLOCKED)
    return blocked_list()


@app.route("/solve", methods=["POST"])
def solve_route():
    progress_reset()
    progress_start()
    set_status("Solving")
    t0 = time.time()

    like = _merge_like_mapping()
    try:
        quantities = parse_quantities(like)
        if not quantities:
            raise InvalidQuantity("nothing parsed from request")
        blocked = _blocked_from_like(like["blocked"]) if "blocked" in like else current_blocked()
        result = solve(quantities, blocked)
    except InvalidInput as e:
        reason = f"Bad input: {e}"
        _finalize_solver_progress(False, reason)
        LAST_RESULT.update({"ok": False, "status": "invalid_input", "reason": reason, "svg": "", "legend": ""})
        return jsonify({"ok": False, "status": "invalid_input", "reason": reason}), 400

    _finalize_solver_progress(result.ok, result.reason or result.status)
    set_elapsed(time.time() - t0)

    svg, legend = "", ""
    if result.ok:
        svg, legend = render_grid(result.grid, result.placements)
        try:
            write_coords(result.placements, BASE_DIR)
            write_layout_view_html(svg, legend, BASE_DIR, note=result.reason)
        except OSError:
            log.exception("could not write solver outputs")

    LAST_RESULT.update({
        "ok": result.ok,
        "status": result.status,
        "reason": result.reason,
        "svg": svg,
        "legend": legend,
        "quantities": fmt_quantities(quantities),
        "elapsed_str": _fmt_elapsed(time.time() - t0),
    })
    set_result_url(url_for("result_latest"))

    payload = result_payload(result)
    payload["result_url"] = url_for("result_latest")
    return jsonify(payload)


@app.route("/result/latest")
def result_latest():
    note = f"{LAST_RESULT.get('status')}: {LAST_RESULT.get('reason')}"
    return layout_view_html(LAST_RESULT.get("svg", ""), LAST_RESULT.get("legend", ""),
                            title="Result", note=note)


@app.route("/download/coords")
def download_coords():
    return send_from_directory(COORDS_DIR, COORDS_FILENAME, as_attachment=True)


@app.route("/download/html")
def download_html():
    return send_from_directory(LAYOUT_DIR, LAYOUT_FILENAME, as_attachment=True)


@app.route("/progress3")
def progress3():
    return jsonify(progress_json())


if __name__ == "__main__":
    app.run(debug=False)
