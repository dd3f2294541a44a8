import os
from collections.abc import Mapping
from dataclasses import dataclass, replace

from asciicanvas.session import DEFAULT_PORT

ENV_PREFIX = "ASCIICANVAS_"


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(f"{ENV_PREFIX}{name}")
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    host: str | None = None
    port: int = DEFAULT_PORT
    # Size of the canvas created when no source or server is given
    standalone_rows: int = 1000
    standalone_cols: int = 1000
    log_level: str = "WARNING"
    log_file: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        environ = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            host=environ.get(f"{ENV_PREFIX}HOST") or defaults.host,
            port=_env_int(environ, "PORT", defaults.port),
            standalone_rows=_env_int(environ, "ROWS", defaults.standalone_rows),
            standalone_cols=_env_int(environ, "COLS", defaults.standalone_cols),
            log_level=(environ.get(f"{ENV_PREFIX}LOG_LEVEL") or defaults.log_level).upper(),
            log_file=environ.get(f"{ENV_PREFIX}LOG_FILE") or defaults.log_file,
        )

    def override(self, **changes) -> "Settings":
        """Copy with every non-None keyword applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})
