class CanvasError(Exception):
    """Base class for every error raised by asciicanvas."""


class OutOfBounds(CanvasError, IndexError):
    def __init__(self, message: str, *, row: int | None = None, col: int | None = None, index: int | None = None):
        super().__init__(message)
        self.row = row
        self.col = col
        self.index = index


class InvalidRegion(CanvasError, ValueError):
    def __init__(self, message: str, region: tuple[int, int, int, int]):
        super().__init__(message)
        self.region = region


class TruncatedInput(CanvasError, ValueError):
    def __init__(self, expected: int, actual: int):
        super().__init__(f"Expected {expected} bytes, got {actual}")
        self.expected = expected
        self.actual = actual


class ProtocolError(CanvasError, ValueError):
    def __init__(self, message: str, line: bytes | None = None):
        super().__init__(message)
        self.line = line
