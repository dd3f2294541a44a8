"""Line-oriented commands exchanged between canvas peers.

Two commands exist, each terminated by a newline::

    /canvas_size <cols> <rows>
    /set <x> <y> <char>

``/canvas_size`` is followed on the wire by exactly ``cols * rows`` raw bytes:
the serialized canvas. ``x`` is a column and ``y`` a row.

The payload of ``/set`` is not escaped. Lines are split on single spaces at
most three times so a space payload survives, but a newline payload cannot be
sent at all and is rejected.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from asciicanvas.canvas import Canvas, to_byte
from asciicanvas.errors import ProtocolError

logger = logging.getLogger(__name__)

CANVAS_SIZE = b"/canvas_size"
SET = b"/set"
NEWLINE = b"\n"

# Longest line a peer may send before we give up looking for its newline
MAX_LINE_LENGTH = 1024


@dataclass(frozen=True)
class CanvasSize:
    cols: int
    rows: int

    @property
    def payload_size(self) -> int:
        return self.cols * self.rows

    def encode(self) -> bytes:
        return encode_canvas_size(self.cols, self.rows)


@dataclass(frozen=True)
class SetCell:
    x: int
    y: int
    value: int  # cell byte

    @property
    def char(self) -> str:
        return chr(self.value)

    def encode(self) -> bytes:
        return encode_set(self.x, self.y, self.value)

    def apply(self, canvas: Canvas) -> bool:
        """Write the cell if it lies on ``canvas``; returns whether it was written."""
        if not canvas.is_in_bounds(self.y, self.x):
            logger.warning("Dropping /set outside %r: x=%d y=%d", canvas, self.x, self.y)
            return False
        canvas.set(self.y, self.x, self.value)
        return True


Command = CanvasSize | SetCell


def encode_canvas_size(cols: int, rows: int) -> bytes:
    if cols < 0 or rows < 0:
        raise ValueError(f"Canvas size must be non-negative, got {cols}x{rows}")
    return b"%s %d %d\n" % (CANVAS_SIZE, cols, rows)


def encode_set(x: int, y: int, char: str | bytes | int) -> bytes:
    byte = to_byte(char)
    if byte == NEWLINE[0]:
        raise ProtocolError("A newline cannot be sent in a /set command")
    return b"%s %d %d %c\n" % (SET, x, y, byte)


def _parse_int(token: bytes, line: bytes) -> int:
    try:
        return int(token)
    except ValueError:
        raise ProtocolError(f"Expected an integer, got {token!r}", line) from None


def parse_command(line: bytes | str) -> Command:
    """Parse one protocol line, with or without its trailing newline."""
    if isinstance(line, str):
        line = line.encode("latin-1")
    raw = line
    if line.endswith(NEWLINE):
        line = line[:-1]

    name, _, rest = line.partition(b" ")
    if name == CANVAS_SIZE:
        parts = rest.split()
        if len(parts) != 2:
            raise ProtocolError("/canvas_size takes <cols> <rows>", raw)
        cols, rows = (_parse_int(p, raw) for p in parts)
        if cols < 0 or rows < 0:
            raise ProtocolError("Canvas size must be non-negative", raw)
        return CanvasSize(cols=cols, rows=rows)
    if name == SET:
        parts = rest.split(b" ", 2)
        if len(parts) != 3 or len(parts[2]) != 1:
            raise ProtocolError("/set takes <x> <y> <char>", raw)
        x, y = _parse_int(parts[0], raw), _parse_int(parts[1], raw)
        return SetCell(x=x, y=y, value=parts[2][0])
    raise ProtocolError(f"Unknown command {name!r}", raw)


class LineReader:
    """Accumulates stream bytes and hands them back as lines or fixed-size payloads."""

    def __init__(self, max_line_length: int = MAX_LINE_LENGTH):
        self._buffer = bytearray()
        self.max_line_length = max_line_length

    def feed(self, data: bytes) -> None:
        self._buffer.extend(data)

    @property
    def pending(self) -> int:
        return len(self._buffer)

    def has_line(self) -> bool:
        return NEWLINE in self._buffer

    def next_line(self) -> bytes | None:
        """Pop the next complete line including its newline, or None if incomplete."""
        end = self._buffer.find(NEWLINE)
        if end < 0:
            if len(self._buffer) > self.max_line_length:
                raise ProtocolError(f"No newline within {self.max_line_length} bytes", bytes(self._buffer[:64]))
            return None
        line = bytes(self._buffer[: end + 1])
        del self._buffer[: end + 1]
        return line

    def lines(self):
        while (line := self.next_line()) is not None:
            yield line

    def take(self, size: int) -> bytes | None:
        """Pop exactly ``size`` raw bytes, or None if fewer are buffered."""
        if len(self._buffer) < size:
            return None
        payload = bytes(self._buffer[:size])
        del self._buffer[:size]
        return payload
