"""A single peer connection that keeps one canvas in sync.

All reads and writes go through one :class:`CanvasSession`, so updates to its
canvas are applied one at a time from whichever thread drives the session.
"""

from __future__ import annotations

import logging
import selectors
import socket

from asciicanvas.canvas import Canvas
from asciicanvas.errors import ProtocolError, TruncatedInput
from asciicanvas.protocol import CanvasSize, LineReader, SetCell, encode_set, parse_command

logger = logging.getLogger(__name__)

DEFAULT_PORT = 5000
RECV_SIZE = 4096
# Largest canvas a peer may announce in its handshake
MAX_CELLS = 16 * 1024 * 1024


class CanvasSession:
    def __init__(self, sock: socket.socket, canvas: Canvas | None = None, max_cells: int = MAX_CELLS):
        self.sock = sock
        self.max_cells = max_cells
        self.canvas = canvas
        self._reader = LineReader()
        self._selector = selectors.DefaultSelector()
        self._selector.register(sock, selectors.EVENT_READ)

    @classmethod
    def connect(cls, host: str, port: int = DEFAULT_PORT, timeout: float | None = None) -> CanvasSession:
        logger.info("Connecting to %s:%d", host, port)
        sock = socket.create_connection((host, port), timeout=timeout)
        return cls(sock)

    def __enter__(self) -> CanvasSession:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        if self.sock.fileno() < 0:
            return
        self._selector.unregister(self.sock)
        self._selector.close()
        self.sock.close()
        logger.debug("Session closed")

    def _recv(self) -> bytes:
        data = self.sock.recv(RECV_SIZE)
        if not data:
            raise ConnectionError("Peer closed the connection")
        self._reader.feed(data)
        return data

    # Handshake

    def handshake(self) -> Canvas:
        """Receive the canvas size and initial contents from the peer."""
        line = self._reader.next_line()
        while line is None:
            try:
                self._recv()
            except ConnectionError:
                raise ProtocolError("Peer closed before /canvas_size", self._reader.take(self._reader.pending)) from None
            line = self._reader.next_line()

        command = parse_command(line)
        if not isinstance(command, CanvasSize):
            raise ProtocolError("Expected /canvas_size as the first message", line)
        if command.payload_size > self.max_cells:
            raise ProtocolError(f"Canvas of {command.payload_size} cells exceeds the {self.max_cells} cell limit", line)

        canvas = Canvas(command.rows, command.cols)
        payload = self._reader.take(command.payload_size)
        while payload is None:
            try:
                self._recv()
            except ConnectionError:
                raise TruncatedInput(command.payload_size, self._reader.pending) from None
            payload = self._reader.take(command.payload_size)

        canvas.deserialize(payload)
        self.canvas = canvas
        logger.info("Received %r from peer", canvas)
        return canvas

    def serve_canvas(self, canvas: Canvas) -> None:
        """Send the handshake for ``canvas`` and adopt it as this session's canvas."""
        size = CanvasSize(cols=canvas.num_cols, rows=canvas.num_rows)
        self.sock.sendall(size.encode() + canvas.serialize())
        self.canvas = canvas
        logger.info("Sent %r to peer", canvas)

    # Updates

    def send_set(self, x: int, y: int, char: str | bytes | int) -> None:
        self.sock.sendall(encode_set(x, y, char))

    def set_cell(self, row: int, col: int, char: str | bytes | int) -> None:
        """Write a cell locally, then tell the peer about it."""
        if self.canvas is None:
            raise RuntimeError("Session has no canvas; call handshake() or serve_canvas() first")
        message = encode_set(col, row, char)
        self.canvas.set(row, col, char)
        self.sock.sendall(message)

    def poll(self, timeout: float | None = None) -> list[SetCell]:
        """Wait up to ``timeout`` for peer updates and apply every complete one."""
        if self.canvas is None:
            raise RuntimeError("Session has no canvas; call handshake() or serve_canvas() first")
        if not self._reader.has_line():
            if not self._selector.select(timeout):
                return []
            self._recv()

        applied = []
        for line in self._reader.lines():
            try:
                command = parse_command(line)
            except ProtocolError as e:
                logger.warning("Ignoring malformed line %r: %s", line, e)
                continue
            if not isinstance(command, SetCell):
                logger.warning("Ignoring unexpected %r", command)
                continue
            if command.apply(self.canvas):
                applied.append(command)
        return applied
