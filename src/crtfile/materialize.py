"""Apply a permission mask across a batch of target paths."""

from __future__ import annotations

import logging
from contextlib import nullcontext
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from .file_io import cleared_umask, create_exclusive, truncate_existing
from .permissions import format_mask
from .report import Report, emit_error, emit_line

logger = logging.getLogger(__name__)


class CreateMode(str, Enum):
    CREATE_EXCLUSIVE = "created"
    TRUNCATE_EXISTING = "truncated"


@dataclass(frozen=True)
class FileOutcome:
    path: str
    mode: CreateMode
    error: Report | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchResult:
    outcomes: list[FileOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> list[FileOutcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def failed(self) -> list[FileOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def ok(self) -> bool:
        return all(o.ok for o in self.outcomes)

    @property
    def exit_status(self) -> int:
        return 0 if self.ok else 1


def _apply(path: str, mode: CreateMode, mask: int) -> FileOutcome:
    try:
        if mode is CreateMode.CREATE_EXCLUSIVE:
            create_exclusive(path, mask)
        else:
            truncate_existing(path)
    except OSError as exc:
        reason = exc.strerror or str(exc)
        logger.info("%s failed: %s", mode.name.lower(), reason, extra={"path": path})
        return FileOutcome(path, mode, Report(reason, path=path))
    if mode is CreateMode.CREATE_EXCLUSIVE:
        logger.info("created %s", format_mask(mask), extra={"path": path})
    else:
        logger.info("truncated", extra={"path": path})
    return FileOutcome(path, mode)


def materialize(
    paths: Iterable[str],
    mode: CreateMode,
    mask: int,
    *,
    verbose: bool = False,
    absolute: bool = False,
) -> BatchResult:
    """Create or truncate each path in order, never stopping on a failure.

    Failures are reported on stderr as they happen. With ``verbose`` one line
    per success goes to stdout. With ``absolute`` the umask is cleared for
    the whole batch so ``mask`` is applied literally.
    """
    result = BatchResult()
    with cleared_umask() if absolute else nullcontext():
        for path in paths:
            outcome = _apply(path, mode, mask)
            result.outcomes.append(outcome)
            if outcome.error is not None:
                emit_error(outcome.error)
            elif verbose:
                emit_line(f"file: '{path}': {mode.value}")
    return result
