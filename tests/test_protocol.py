import pytest

from asciicanvas.canvas import Canvas
from asciicanvas.errors import ProtocolError
from asciicanvas.protocol import (
    CanvasSize,
    LineReader,
    SetCell,
    encode_canvas_size,
    encode_set,
    parse_command,
)


def test_encode_canvas_size():
    assert encode_canvas_size(80, 24) == b"/canvas_size 80 24\n"
    assert CanvasSize(cols=2, rows=3).encode() == b"/canvas_size 2 3\n"


def test_encode_set():
    assert encode_set(4, 7, "#") == b"/set 4 7 #\n"
    assert encode_set(0, 0, ord("a")) == b"/set 0 0 a\n"


def test_encode_set_rejects_newline():
    with pytest.raises(ProtocolError, match="newline"):
        encode_set(0, 0, "\n")


def test_parse_canvas_size():
    command = parse_command(b"/canvas_size 80 24\n")
    assert command == CanvasSize(cols=80, rows=24)
    assert command.payload_size == 80 * 24


def test_parse_set():
    command = parse_command(b"/set 4 7 #\n")
    assert command == SetCell(x=4, y=7, value=ord("#"))
    assert command.char == "#"


def test_parse_accepts_str_and_missing_newline():
    assert parse_command("/set 1 2 z") == SetCell(x=1, y=2, value=ord("z"))


def test_space_payload_survives():
    line = encode_set(3, 1, " ")
    assert line == b"/set 3 1  \n"
    assert parse_command(line).char == " "


@pytest.mark.parametrize(
    "line",
    [
        b"/set 1 2\n",
        b"/set 1 2 ab\n",
        b"/set x 2 a\n",
        b"/canvas_size 80\n",
        b"/canvas_size 80 -1\n",
        b"/canvas_size a b\n",
        b"/draw 1 2 a\n",
        b"\n",
    ],
)
def test_parse_rejects_malformed(line):
    with pytest.raises(ProtocolError):
        parse_command(line)


def test_protocol_error_keeps_line():
    with pytest.raises(ProtocolError) as excinfo:
        parse_command(b"/nope\n")
    assert excinfo.value.line == b"/nope\n"


def test_set_apply_in_bounds():
    canvas = Canvas.blank(3, 2)
    assert SetCell(x=1, y=2, value=ord("Q")).apply(canvas)
    assert canvas.get(2, 1) == "Q"


def test_set_apply_out_of_bounds_is_dropped():
    canvas = Canvas.blank(3, 2)
    before = canvas.copy()
    assert not SetCell(x=2, y=0, value=ord("Q")).apply(canvas)
    assert canvas == before


def test_line_reader_splits_lines():
    reader = LineReader()
    reader.feed(b"/set 0 0 a\n/set 1")
    assert reader.has_line()
    assert list(reader.lines()) == [b"/set 0 0 a\n"]
    assert not reader.has_line()
    reader.feed(b" 0 b\n")
    assert reader.next_line() == b"/set 1 0 b\n"
    assert reader.next_line() is None
    assert reader.pending == 0


def test_line_reader_take_payload_then_line():
    reader = LineReader()
    reader.feed(b"/canvas_size 2 1\nab/set 0 0 x\n")
    size = parse_command(reader.next_line())
    assert size == CanvasSize(cols=2, rows=1)
    assert reader.take(size.payload_size) == b"ab"
    assert reader.next_line() == b"/set 0 0 x\n"


def test_line_reader_take_waits_for_enough_bytes():
    reader = LineReader()
    reader.feed(b"abc")
    assert reader.take(4) is None
    assert reader.pending == 3


def test_line_reader_rejects_runaway_line():
    reader = LineReader(max_line_length=8)
    reader.feed(b"x" * 9)
    with pytest.raises(ProtocolError):
        reader.next_line()
