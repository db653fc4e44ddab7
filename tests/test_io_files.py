import os
import tempfile
import unittest

from config import CFG
from io_files import write_coords, write_layout_view_html
from models import Placement


class WriteOutputsTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        self._orig_coords = CFG.COORDS_OUT
        self._orig_layout = CFG.LAYOUT_HTML

    def tearDown(self) -> None:
        CFG.COORDS_OUT = self._orig_coords
        CFG.LAYOUT_HTML = self._orig_layout

    def test_write_coords_uses_configured_relative_path(self) -> None:
        CFG.COORDS_OUT = "outputs/custom_coords.txt"
        placed = [Placement(1, "2x2", 0, 1, 2, 2), Placement(2, "1x1", 0, 3)]

        path = write_coords(placed, self.tmpdir.name)

        expected = os.path.join(self.tmpdir.name, "outputs", "custom_coords.txt")
        self.assertEqual(path, expected)

        with open(path, "r", encoding="utf-8") as fh:
            lines = fh.read().splitlines()
        self.assertEqual(lines, [
            "#1 2x2 @ (0,1) size (2×2)",
            "#2 1x1 @ (0,3) size (1×1)",
        ])

    def test_write_coords_without_placements(self) -> None:
        CFG.COORDS_OUT = "coords.txt"

        path = write_coords([], self.tmpdir.name)

        with open(path, "r", encoding="utf-8") as fh:
            self.assertEqual(fh.read(), "No solution\n")

    def test_write_layout_view_html_accepts_absolute_path(self) -> None:
        target = os.path.join(self.tmpdir.name, "html", "layout.html")
        CFG.LAYOUT_HTML = target

        svg = "<svg></svg>"
        legend = "<li>#1 2x2</li>"

        path = write_layout_view_html(svg, legend, self.tmpdir.name, note="Placement found")

        self.assertEqual(path, target)
        with open(path, "r", encoding="utf-8") as fh:
            contents = fh.read()
        self.assertIn(svg, contents)
        self.assertIn(legend, contents)
        self.assertIn("Placement found", contents)


if __name__ == "__main__":
    unittest.main()
