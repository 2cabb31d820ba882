"""Logging configuration shared by the dashboard and the tool server."""
import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_configured = False


def configure_logging(debug: bool = False, log_dir: Path | None = None) -> Path | None:
    """Send log records to ``<log_dir>/latest.log`` and to stderr.

    Stdout is left alone because the tool server speaks its protocol over
    stdio. Calling this more than once is a no-op. Returns the log file path.
    """
    global _configured
    if _configured:
        return None

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    log_file = None
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / "latest.log"
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
        handlers=handlers,
    )
    _configured = True
    return log_file
