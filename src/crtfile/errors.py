"""Fatal error types for crtfile.

Per-file failures are not exceptions; they travel as ``Report`` values
inside a ``BatchResult``.
"""

from __future__ import annotations

from .report import Report


class CrtfileError(Exception):
    """Base for errors that abort the run before any file is touched."""

    def report(self) -> Report:
        return Report(str(self))


class UsageError(CrtfileError):
    pass


class ConfigError(CrtfileError):
    pass


class InvalidPermissionLetter(CrtfileError):
    def __init__(self, letter: str, letters: str) -> None:
        super().__init__(f"unrecognized permission '{letter}' in '{letters}'")
        self.letter = letter
        self.letters = letters


class PermissionNotSet(CrtfileError):
    def __init__(self) -> None:
        super().__init__("permission not set")
