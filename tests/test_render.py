from models import Placement
from render import COLORS, render_grid


def test_render_grid_colours_cells_by_state():
    snapshot = [[-1, 1], [0, 1]]
    placed = [Placement(1, "1x2", 0, 1, 2, 1)]

    svg, legend = render_grid(snapshot, placed, cell_px=10)

    assert svg.startswith("<svg")
    assert 'width="22" height="22"' in svg
    assert svg.count('fill="gray"') == 1
    assert svg.count('fill="white"') == 1
    assert svg.count(f'fill="{COLORS[1]}"') == 2
    assert ">1</text>" in svg
    assert "#1 1x2" in legend


def test_render_grid_without_placements_has_empty_legend():
    svg, legend = render_grid([[0, 0, 0]], cell_px=5)

    assert "<text" not in svg
    assert legend == ""
