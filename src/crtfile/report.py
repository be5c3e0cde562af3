"""Structured diagnostics and their rendering."""

from __future__ import annotations

from dataclasses import dataclass

from rich.console import Console

PROG = "crtfile"

console = Console(highlight=False, emoji=False, soft_wrap=True)
err_console = Console(stderr=True, highlight=False, emoji=False, soft_wrap=True)


@dataclass(frozen=True)
class Report:
    message: str
    path: str | None = None

    def render(self) -> str:
        if self.path is None:
            return f"{PROG}: {self.message}"
        return f"{PROG}: file: '{self.path}': {self.message}"


def emit_error(report: Report) -> None:
    err_console.print(report.render(), markup=False)


def emit_line(text: str) -> None:
    console.print(text, markup=False)
