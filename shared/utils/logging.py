"""Logging setup shared by all CLI commands.

Log records go to a JSON-lines file in the run's log directory; the console
only shows warnings (or everything with --verbose) through rich.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from rich.logging import RichHandler

_RESERVED = set(vars(logging.makeLogRecord({})))


class JSONFormatter(logging.Formatter):
    """Format log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # Extra fields passed via logger.info(..., extra={...})
        for key, value in vars(record).items():
            if key not in _RESERVED and key not in entry and not key.startswith("_"):
                entry[key] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(log_dir: Path, verbose: bool = False, name: str = "pangram") -> Path:
    """Configure the root logger for a CLI run.

    Args:
        log_dir: Directory for the log file (created if missing)
        verbose: Show DEBUG output on the console
        name: Prefix for the log file name

    Returns:
        Path of the log file
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"{name}_{timestamp}.jsonl"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    file_handler.setFormatter(JSONFormatter())
    root.addHandler(file_handler)

    console_handler = RichHandler(show_path=False, markup=False)
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root.addHandler(console_handler)

    # Keep HTTP client chatter out of the console
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    return log_file


def log_summary(logger: logging.Logger, summary: Dict[str, Any], message: Optional[str] = None) -> None:
    """Log a run summary as structured extra fields."""
    logger.info(message or "Run summary", extra={"summary": summary})
