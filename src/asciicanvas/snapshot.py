import struct
from pathlib import Path

from asciicanvas.canvas import Canvas
from asciicanvas.errors import TruncatedInput

MAGIC = b"ACNV"
FORMAT_VERSION = 1
SUFFIX = ".acnv"

_HEADER = struct.Struct(">II")


def save_snapshot(canvas: Canvas, path: str | Path) -> None:
    """Write the canvas dimensions followed by its serialized cells."""
    path = Path(path)
    with path.open("wb") as f:
        f.write(MAGIC)
        f.write(struct.pack("B", FORMAT_VERSION))
        f.write(_HEADER.pack(canvas.num_rows, canvas.num_cols))
        f.write(canvas.serialize())


def load_snapshot(path: str | Path) -> Canvas:
    path = Path(path)
    with path.open("rb") as f:
        magic = f.read(4)
        if magic != MAGIC:
            raise ValueError(f"Not an ACNV file: {magic!r}")
        version_byte = f.read(1)
        if not version_byte:
            raise TruncatedInput(1, 0)
        (version,) = struct.unpack("B", version_byte)
        if version != FORMAT_VERSION:
            raise ValueError(f"Unsupported format version: {version}")
        header = f.read(_HEADER.size)
        if len(header) < _HEADER.size:
            raise TruncatedInput(_HEADER.size, len(header))
        rows, cols = _HEADER.unpack(header)
        # Checked before allocating so a corrupt header cannot request a huge canvas
        payload = f.read()
        if len(payload) < rows * cols:
            raise TruncatedInput(rows * cols, len(payload))
        return Canvas(rows, cols).deserialize(payload)


def is_snapshot(path: str | Path) -> bool:
    path = Path(path)
    if path.suffix == SUFFIX:
        return True
    with path.open("rb") as f:
        return f.read(len(MAGIC) + 1) == MAGIC + struct.pack("B", FORMAT_VERSION)
