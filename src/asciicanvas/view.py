from __future__ import annotations

import os
import sys
from dataclasses import dataclass

from asciicanvas.canvas import Canvas
from asciicanvas.charsets import ENCODING, OUTSIDE_FILL


def terminal_size() -> tuple[int, int]:
    """Return (columns, lines) of the terminal, or (80, 24) if not a tty."""
    if not sys.stdout.isatty():
        return (80, 24)
    size = os.get_terminal_size()
    return (size.columns, size.lines)


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


@dataclass
class Viewport:
    """A ``height`` x ``width`` window onto a canvas, with its top-left cell at (row, col)."""

    canvas: Canvas
    height: int
    width: int
    row: int = 0
    col: int = 0

    def __post_init__(self):
        if self.height < 0 or self.width < 0:
            raise ValueError(f"Viewport size must be non-negative, got {self.height}x{self.width}")
        self.scroll(0, 0)

    def scroll(self, rows: int, cols: int) -> None:
        """Move the window, keeping its origin on the canvas."""
        self.row = _clamp(self.row + rows, 0, max(self.canvas.num_rows - 1, 0))
        self.col = _clamp(self.col + cols, 0, max(self.canvas.num_cols - 1, 0))

    def visible(self) -> tuple[int, int]:
        """Rows and columns of canvas that fall inside the window."""
        rows = _clamp(self.canvas.num_rows - self.row, 0, self.height)
        cols = _clamp(self.canvas.num_cols - self.col, 0, self.width)
        return rows, cols

    def canvas_coords(self, y: int, x: int) -> tuple[int, int]:
        """Map a window position to the canvas cell drawn there."""
        return self.row + y, self.col + x

    def render(self) -> list[str]:
        """One string per window row; area past the canvas edge is drawn with OUTSIDE_FILL."""
        rows, cols = self.visible()
        cells = self.canvas.cells
        lines = []
        for y in range(self.height):
            shown = ""
            if y < rows:
                shown = cells[self.row + y, self.col : self.col + cols].tobytes().decode(ENCODING)
            lines.append(shown + OUTSIDE_FILL * (self.width - len(shown)))
        return lines
