import argparse
import logging
import sys
from pathlib import Path

from asciicanvas.canvas import Canvas
from asciicanvas.charsets import ENCODING
from asciicanvas.config import Settings
from asciicanvas.errors import CanvasError
from asciicanvas.export import save_image
from asciicanvas.log import configure_logging
from asciicanvas.session import CanvasSession
from asciicanvas.snapshot import is_snapshot, load_snapshot, save_snapshot
from asciicanvas.view import Viewport, terminal_size

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Load, trim and display an ASCII canvas")
    parser.add_argument("source", nargs="?", help="Snapshot (.acnv) or text file to load")
    parser.add_argument("--connect", metavar="HOST", default=None, help="Fetch the canvas from a canvas server")
    parser.add_argument("-p", "--port", type=int, default=None, help="Server port (default: 5000)")
    parser.add_argument("-t", "--trim", action="store_true", default=False, help="Trim blank border rows and columns")
    parser.add_argument("--blank", default=" ", help="Cell treated as blank when trimming (default: space)")
    parser.add_argument("--width", type=int, default=None, help="Viewport width in columns (default: terminal width)")
    parser.add_argument("--height", type=int, default=None, help="Viewport height in rows (default: terminal height)")
    parser.add_argument("--row", type=int, default=0, help="Top canvas row shown in the viewport")
    parser.add_argument("--col", type=int, default=0, help="Left canvas column shown in the viewport")
    parser.add_argument("--save", metavar="PATH", default=None, help="Write the canvas as a snapshot file")
    parser.add_argument("--png", metavar="PATH", default=None, help="Export the canvas as an image")
    parser.add_argument("--font", default=None, help="TrueType font for --png (default: Pillow's built-in font)")
    parser.add_argument("--log-file", default=None, help="Append log output to this file instead of stderr")
    parser.add_argument("-v", "--verbose", action="store_true", default=False, help="Enable debug logging")
    return parser


def load_file(path: Path) -> Canvas:
    if is_snapshot(path):
        return load_snapshot(path)
    return Canvas.from_lines(path.read_text(encoding=ENCODING).splitlines())


def fetch_canvas(host: str, port: int) -> Canvas:
    with CanvasSession.connect(host, port) as session:
        return session.handshake()


def load_canvas(source: str | None, settings: Settings) -> Canvas:
    if source is not None:
        return load_file(Path(source))
    if settings.host is not None:
        return fetch_canvas(settings.host, settings.port)
    logger.debug("No source given, using a blank %dx%d canvas", settings.standalone_rows, settings.standalone_cols)
    return Canvas.blank(settings.standalone_rows, settings.standalone_cols)


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.source is not None and args.connect is not None:
        parser.error("give either a source file or --connect, not both")

    if args.source is not None and not Path(args.source).exists():
        print(f"File not found: {args.source}", file=sys.stderr)
        sys.exit(1)

    try:
        settings = Settings.from_env().override(
            host=args.connect,
            port=args.port,
            log_level="DEBUG" if args.verbose else None,
            log_file=args.log_file,
        )
        configure_logging(settings.log_level, settings.log_file)

        canvas = load_canvas(args.source, settings)
        if args.trim:
            canvas = canvas.trim(args.blank)

        if args.save is not None:
            save_snapshot(canvas, args.save)
        if args.png is not None:
            save_image(canvas, args.png, font_path=args.font)
        if args.save is None and args.png is None:
            columns, lines = terminal_size()
            view = Viewport(
                canvas,
                height=args.height if args.height is not None else lines - 1,
                width=args.width if args.width is not None else columns,
                row=args.row,
                col=args.col,
            )
            print("\n".join(view.render()))
    except (CanvasError, OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)
