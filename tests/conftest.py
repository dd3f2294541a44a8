import shutil
import subprocess
from pathlib import Path

import pytest

from asciicanvas.canvas import Canvas

ROWS = 3
COLS = 2
LOAD_STR = "012345"

_FONT_CANDIDATES = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationMono-Regular.ttf",
    "/usr/share/fonts/TTF/DejaVuSansMono.ttf",
    "/usr/share/fonts/dejavu-sans-mono-fonts/DejaVuSansMono.ttf",
]


def _find_monospace_font():
    """Find a monospace font on the system."""
    for path in _FONT_CANDIDATES:
        if Path(path).exists():
            return path
    if shutil.which("fc-match"):
        out = subprocess.run(["fc-match", "-f", "%{file}", "monospace"], capture_output=True, text=True)
        if out.returncode == 0 and out.stdout.strip():
            return out.stdout.strip()
    return None


@pytest.fixture
def loaded():
    """3x2 canvas holding::

         01
        +--
       0|01
       1|23
       2|45
    """
    return Canvas.from_str(ROWS, COLS, LOAD_STR)


@pytest.fixture
def font_path():
    path = _find_monospace_font()
    if path is None:
        pytest.skip("No monospace font found on system")
    return path
