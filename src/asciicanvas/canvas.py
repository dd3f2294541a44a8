from __future__ import annotations

from typing import Iterable, NamedTuple

import numpy as np

from asciicanvas.charsets import BLANK, ENCODING
from asciicanvas.errors import InvalidRegion, OutOfBounds, TruncatedInput


class Region(NamedTuple):
    """Inclusive rectangle given by two corner cells, in any order."""

    row1: int
    col1: int
    row2: int
    col2: int

    def normalized(self) -> Region:
        return Region(
            min(self.row1, self.row2),
            min(self.col1, self.col2),
            max(self.row1, self.row2),
            max(self.col1, self.col2),
        )

    @property
    def num_rows(self) -> int:
        return abs(self.row2 - self.row1) + 1

    @property
    def num_cols(self) -> int:
        return abs(self.col2 - self.col1) + 1


def _is_int(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


def to_byte(value: str | bytes | int) -> int:
    """Convert a one-character str, a length-1 bytes or an int to a cell byte."""
    if _is_int(value):
        if 0 <= value <= 255:
            return int(value)
        raise ValueError(f"Cell value out of range: {value}")
    if isinstance(value, str):
        if len(value) == 1 and ord(value) < 256:
            return ord(value)
        raise ValueError(f"Cell value must be a single byte character: {value!r}")
    if isinstance(value, (bytes, bytearray)) and len(value) == 1:
        return value[0]
    raise ValueError(f"Invalid cell value: {value!r}")


def _as_bytes(source: str | bytes | bytearray | memoryview) -> bytes:
    if isinstance(source, str):
        return source.encode(ENCODING)
    return bytes(source)


class Canvas:
    """Fixed-size grid of single-byte character cells stored row-major.

    Cells are addressed either by ``(row, col)`` or by the flattened index
    ``row * num_cols + col``. A freshly allocated canvas is zero-filled; use
    :meth:`blank` for a canvas of spaces.
    """

    def __init__(self, rows: int, cols: int):
        if rows < 0 or cols < 0:
            raise ValueError(f"Canvas dimensions must be non-negative, got {rows}x{cols}")
        self._cells = np.zeros((rows, cols), dtype=np.uint8)

    @classmethod
    def blank(cls, rows: int, cols: int, fill: str | bytes | int = BLANK) -> Canvas:
        canvas = cls(rows, cols)
        canvas.fill(fill)
        return canvas

    @classmethod
    def from_str(cls, rows: int, cols: int, source: str | bytes) -> Canvas:
        canvas = cls(rows, cols)
        canvas.load_str(source)
        return canvas

    @classmethod
    def from_lines(cls, lines: Iterable[str], fill: str | bytes | int = BLANK) -> Canvas:
        """Build a canvas as wide as the longest line, padding short lines with ``fill``."""
        encoded = [_as_bytes(line) for line in lines]
        cols = max((len(line) for line in encoded), default=0)
        canvas = cls.blank(len(encoded), cols, fill)
        for r, line in enumerate(encoded):
            if line:
                canvas._cells[r, : len(line)] = np.frombuffer(line, dtype=np.uint8)
        return canvas

    @classmethod
    def _wrap(cls, cells: np.ndarray) -> Canvas:
        canvas = cls.__new__(cls)
        canvas._cells = np.array(cells, dtype=np.uint8, order="C", copy=True)
        return canvas

    @property
    def num_rows(self) -> int:
        return self._cells.shape[0]

    @property
    def num_cols(self) -> int:
        return self._cells.shape[1]

    @property
    def shape(self) -> tuple[int, int]:
        return (self.num_rows, self.num_cols)

    @property
    def size(self) -> int:
        return self._cells.size

    @property
    def cells(self) -> np.ndarray:
        """Read-only view of the underlying (rows, cols) uint8 array."""
        view = self._cells.view()
        view.flags.writeable = False
        return view

    # Bounds

    def is_in_bounds_row(self, row: int) -> bool:
        return _is_int(row) and 0 <= row < self.num_rows

    def is_in_bounds_col(self, col: int) -> bool:
        return _is_int(col) and 0 <= col < self.num_cols

    def is_in_bounds(self, row: int, col: int) -> bool:
        return self.is_in_bounds_row(row) and self.is_in_bounds_col(col)

    def is_in_bounds_index(self, index: int) -> bool:
        return _is_int(index) and 0 <= index < self.size

    def _check(self, row: int, col: int) -> None:
        if not self.is_in_bounds(row, col):
            raise OutOfBounds(
                f"({row}, {col}) is outside a {self.num_rows}x{self.num_cols} canvas",
                row=row,
                col=col,
            )

    def index_of(self, row: int, col: int) -> int:
        self._check(row, col)
        return row * self.num_cols + col

    def coords_of(self, index: int) -> tuple[int, int]:
        if not self.is_in_bounds_index(index):
            raise OutOfBounds(f"Index {index} is outside a canvas of {self.size} cells", index=index)
        return divmod(index, self.num_cols)

    # Cell access

    def get(self, row: int, col: int) -> str:
        return chr(self.get_byte(row, col))

    def get_byte(self, row: int, col: int) -> int:
        self._check(row, col)
        return int(self._cells[row, col])

    def get_index(self, index: int) -> str:
        return self.get(*self.coords_of(index))

    def set(self, row: int, col: int, value: str | bytes | int) -> None:
        byte = to_byte(value)
        self._check(row, col)
        self._cells[row, col] = byte

    def set_index(self, index: int, value: str | bytes | int) -> None:
        byte = to_byte(value)
        row, col = self.coords_of(index)
        self._cells[row, col] = byte

    def fill(self, value: str | bytes | int) -> None:
        self._cells.fill(to_byte(value))

    def load_str(self, source: str | bytes | bytearray) -> int:
        """Write ``source`` row-major from the first cell; returns the number of cells written."""
        data = _as_bytes(source)
        count = min(len(data), self.size)
        if count:
            self._cells.reshape(-1)[:count] = np.frombuffer(data, dtype=np.uint8, count=count)
        return count

    # Equality and copying

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Canvas):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._cells, other._cells))

    __hash__ = None  # type: ignore[assignment]

    def copy(self) -> Canvas:
        return self._wrap(self._cells)

    def __copy__(self) -> Canvas:
        return self.copy()

    def __deepcopy__(self, memo) -> Canvas:
        return self.copy()

    # Regions

    def extract_region(self, row1: int, col1: int, row2: int, col2: int) -> Canvas:
        """Copy the inclusive rectangle spanned by two corner cells into a new canvas."""
        region = Region(row1, col1, row2, col2)
        if not (self.is_in_bounds(row1, col1) and self.is_in_bounds(row2, col2)):
            raise InvalidRegion(
                f"Region {tuple(region)} is outside a {self.num_rows}x{self.num_cols} canvas",
                tuple(region),
            )
        top, left, bottom, right = region.normalized()
        return self._wrap(self._cells[top : bottom + 1, left : right + 1])

    def overlay(self, source: Canvas, row_offset: int, col_offset: int) -> int:
        """Copy ``source`` onto this canvas with its top-left cell at the offset.

        Source cells that land outside this canvas are clipped. The offset
        itself must be a valid cell. Returns 1 on success.
        """
        return self._overlay(source, row_offset, col_offset, None)

    def overlay_transparent(
        self, source: Canvas, row_offset: int, col_offset: int, skip_value: str | bytes | int
    ) -> int:
        """Like :meth:`overlay`, but source cells equal to ``skip_value`` leave the destination untouched."""
        return self._overlay(source, row_offset, col_offset, to_byte(skip_value))

    def _overlay(self, source: Canvas, row_offset: int, col_offset: int, skip: int | None) -> int:
        self._check(row_offset, col_offset)
        rows = min(source.num_rows, self.num_rows - row_offset)
        cols = min(source.num_cols, self.num_cols - col_offset)
        # Copy first so a canvas can be overlaid onto itself
        patch = source._cells[:rows, :cols].copy()
        target = self._cells[row_offset : row_offset + rows, col_offset : col_offset + cols]
        if skip is None:
            target[...] = patch
        else:
            opaque = patch != skip
            target[opaque] = patch[opaque]
        return 1

    # Trimming

    def _trim_bounds(self, blank: int, top: bool, bottom: bool, left: bool, right: bool) -> tuple[int, int, int, int]:
        used = self._cells != blank
        rows_used = used.any(axis=1)
        cols_used = used.any(axis=0)

        first_row, last_row = 0, self.num_rows - 1
        first_col, last_col = 0, self.num_cols - 1
        if top:
            while first_row < self.num_rows and not rows_used[first_row]:
                first_row += 1
        if bottom:
            while last_row >= 0 and not rows_used[last_row]:
                last_row -= 1
        if left:
            while first_col < self.num_cols and not cols_used[first_col]:
                first_col += 1
        if right:
            while last_col >= 0 and not cols_used[last_col]:
                last_col -= 1
        return first_row, first_col, last_row, last_col

    def trim_region(
        self,
        blank: str | bytes | int = BLANK,
        top: bool = True,
        bottom: bool = True,
        left: bool = True,
        right: bool = True,
    ) -> Region | None:
        """Region that :meth:`trim` keeps, or None when nothing is left."""
        first_row, first_col, last_row, last_col = self._trim_bounds(to_byte(blank), top, bottom, left, right)
        if first_row > last_row or first_col > last_col:
            return None
        return Region(first_row, first_col, last_row, last_col)

    def trim(
        self,
        blank: str | bytes | int = BLANK,
        top: bool = True,
        bottom: bool = True,
        left: bool = True,
        right: bool = True,
    ) -> Canvas:
        """Strip border rows and columns made only of ``blank`` from the enabled edges.

        Each edge moves inward independently. When an axis is trimmed away
        entirely the result has zero size along it.
        """
        first_row, first_col, last_row, last_col = self._trim_bounds(to_byte(blank), top, bottom, left, right)
        rows = max(last_row - first_row + 1, 0)
        cols = max(last_col - first_col + 1, 0)
        if rows == 0 or cols == 0:
            return Canvas(rows, cols)
        return self.extract_region(first_row, first_col, last_row, last_col)

    # Serialization

    def serialize(self) -> bytes:
        """Row-major bytes of every cell, exactly ``num_rows * num_cols`` long."""
        return self._cells.tobytes()

    def deserialize(self, data: bytes | bytearray | memoryview) -> Canvas:
        """Overwrite every cell from row-major ``data``; trailing bytes are ignored."""
        data = bytes(data)
        if len(data) < self.size:
            raise TruncatedInput(self.size, len(data))
        if self.size:
            self._cells[...] = np.frombuffer(data, dtype=np.uint8, count=self.size).reshape(self.shape)
        return self

    # Text

    def to_lines(self) -> list[str]:
        return [row.tobytes().decode(ENCODING) for row in self._cells]

    def __str__(self) -> str:
        return "\n".join(self.to_lines())

    def __repr__(self) -> str:
        return f"Canvas(rows={self.num_rows}, cols={self.num_cols})"


def serialize(canvas: Canvas) -> bytes:
    return canvas.serialize()


def deserialize(data: bytes | bytearray | memoryview, dest: Canvas) -> Canvas:
    return dest.deserialize(data)
