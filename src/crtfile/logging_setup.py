"""Logging configuration for crtfile.

Per-file outcome records carry the target in ``extra={"path": ...}``. The
log file renders them in the same ``file: '<path>': ...`` shape the tool
prints, and the stderr handler drops them because failures are already
reported there as diagnostics.
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
from pathlib import Path

_PACKAGE = "crtfile"
_LOG_BYTES = 1 * 1024 * 1024  # 1 MiB per file
_LOG_BACKUPS = 3
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _is_outcome(record: logging.LogRecord) -> bool:
    return hasattr(record, "path")


class OutcomeFormatter(logging.Formatter):
    """Format per-file records as ``file: '<path>': <message>``."""

    _outcome = logging.Formatter(
        "%(asctime)s [%(levelname)s] file: '%(path)s': %(message)s", datefmt=_DATEFMT
    )

    def __init__(self) -> None:
        super().__init__("%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt=_DATEFMT)

    def format(self, record: logging.LogRecord) -> str:
        if _is_outcome(record):
            return self._outcome.format(record)
        return super().format(record)


def configure(log_file: Path | None = None, *, debug: bool = False, reconfigure: bool = False) -> None:
    """Attach handlers to the crtfile package logger.

    The file handler is only attached when *log_file* is given. Idempotent
    unless *reconfigure* is True.
    """
    pkg_logger = logging.getLogger(_PACKAGE)
    if pkg_logger.handlers and not reconfigure:
        return
    if reconfigure:
        pkg_logger.handlers.clear()

    pkg_logger.setLevel(logging.DEBUG if debug else logging.INFO)

    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            fh = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=_LOG_BYTES,
                backupCount=_LOG_BACKUPS,
                encoding="utf-8",
            )
            fh.setFormatter(OutcomeFormatter())
            pkg_logger.addHandler(fh)
        except OSError as exc:
            print(f"crtfile: could not open log file {log_file}: {exc}", file=sys.stderr)

    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(logging.DEBUG if debug else logging.WARNING)
    sh.addFilter(lambda record: not _is_outcome(record))
    sh.setFormatter(logging.Formatter("crtfile: %(message)s"))
    pkg_logger.addHandler(sh)

    pkg_logger.propagate = False
