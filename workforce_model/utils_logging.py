from __future__ import annotations

"""Logging utilities.

Console plus `logs/run.log` output for CLI runs and dashboard sessions.
The root logger is configured once; module loggers inherit from it.
"""

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(log_dir: Path, debug: bool = False, filename: str = "run.log") -> Path:
    """Configure root logging for the application and return the log file path.

    - Creates the log directory if missing
    - Streams logs to both stdout and `<log_dir>/<filename>`
    - Uses DEBUG level if `debug=True`, otherwise INFO
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / filename

    level = logging.DEBUG if debug else logging.INFO

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(log_file, mode="w", encoding="utf-8"),
        ],
        force=True,
    )
    return log_file
