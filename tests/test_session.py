import socket

import pytest

from asciicanvas.canvas import Canvas
from asciicanvas.errors import OutOfBounds, ProtocolError, TruncatedInput
from asciicanvas.protocol import SetCell
from asciicanvas.session import CanvasSession


@pytest.fixture
def pair():
    client_sock, server_sock = socket.socketpair()
    client = CanvasSession(client_sock)
    server = CanvasSession(server_sock)
    yield client, server
    client.close()
    server.close()


def test_handshake(pair, loaded):
    client, server = pair
    server.serve_canvas(loaded)
    canvas = client.handshake()
    assert canvas == loaded
    assert canvas is not loaded
    assert client.canvas is canvas


def test_handshake_split_across_writes(pair, loaded):
    client, server = pair
    server.sock.sendall(b"/canvas_size 2")
    server.sock.sendall(b" 3\n012")
    server.sock.sendall(b"345")
    assert client.handshake() == loaded


def test_handshake_keeps_bytes_after_payload(pair, loaded):
    client, server = pair
    server.sock.sendall(b"/canvas_size 2 3\n012345/set 0 0 X\n")
    client.handshake()
    assert client.poll(timeout=0) == [SetCell(x=0, y=0, value=ord("X"))]
    assert client.canvas.get(0, 0) == "X"


def test_handshake_truncated_payload(pair):
    client, server = pair
    server.sock.sendall(b"/canvas_size 2 3\n01")
    server.close()
    with pytest.raises(TruncatedInput):
        client.handshake()


def test_handshake_peer_closes_before_size(pair):
    client, server = pair
    server.close()
    with pytest.raises(ProtocolError, match="closed before"):
        client.handshake()


def test_handshake_peer_closes_mid_size_line(pair):
    client, server = pair
    server.sock.sendall(b"/canvas_si")
    server.close()
    with pytest.raises(ProtocolError) as excinfo:
        client.handshake()
    assert excinfo.value.line == b"/canvas_si"


def test_handshake_rejects_oversized_canvas():
    a, b = socket.socketpair()
    with CanvasSession(a, max_cells=100) as client, CanvasSession(b) as server:
        server.sock.sendall(b"/canvas_size 100000 100000\n")
        with pytest.raises(ProtocolError, match="cell limit"):
            client.handshake()


def test_handshake_requires_canvas_size(pair):
    client, server = pair
    server.sock.sendall(b"/set 0 0 a\n")
    with pytest.raises(ProtocolError):
        client.handshake()


def test_handshake_empty_canvas(pair):
    client, server = pair
    server.serve_canvas(Canvas(0, 0))
    assert client.handshake().shape == (0, 0)


def test_set_cell_is_applied_on_both_sides(pair, loaded):
    client, server = pair
    server.serve_canvas(loaded)
    client.handshake()

    server.set_cell(0, 1, "Z")
    assert server.canvas.get(0, 1) == "Z"
    assert client.poll(timeout=1) == [SetCell(x=1, y=0, value=ord("Z"))]
    assert client.canvas.get(0, 1) == "Z"
    assert client.canvas == server.canvas


def test_poll_without_data_returns_nothing(pair, loaded):
    client, server = pair
    server.serve_canvas(loaded)
    client.handshake()
    assert client.poll(timeout=0) == []


def test_poll_skips_bad_and_out_of_bounds_lines(pair, loaded):
    client, server = pair
    server.serve_canvas(loaded)
    client.handshake()
    server.sock.sendall(b"/set 0 0 a\n/bogus\n/set 9 9 b\n/canvas_size 1 1\n/set 1 2 c\n")
    applied = client.poll(timeout=1)
    assert applied == [SetCell(x=0, y=0, value=ord("a")), SetCell(x=1, y=2, value=ord("c"))]
    assert str(client.canvas) == "a1\n23\n4c"


def test_poll_peer_disconnect(pair, loaded):
    client, server = pair
    server.serve_canvas(loaded)
    client.handshake()
    server.close()
    with pytest.raises(ConnectionError):
        client.poll(timeout=1)


def test_set_cell_out_of_bounds_sends_nothing(pair, loaded):
    client, server = pair
    server.serve_canvas(loaded)
    client.handshake()
    with pytest.raises(OutOfBounds):
        server.set_cell(5, 5, "x")
    assert client.poll(timeout=0) == []


def test_session_requires_canvas(pair):
    client, _ = pair
    with pytest.raises(RuntimeError):
        client.set_cell(0, 0, "x")
    with pytest.raises(RuntimeError):
        client.poll(timeout=0)


def test_context_manager_closes_socket():
    a, b = socket.socketpair()
    with CanvasSession(a) as session:
        pass
    assert session.sock.fileno() == -1
    session.close()
    b.close()
