"""
Parse diagnostics — one record per malformed line or structural error.

Backends never raise for bad cheat data; they report through a
DiagnosticSink and carry on (or stop the current file, for structural
errors in .ini sources).
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

__all__ = ["Diagnostic", "DiagnosticSink", "LoggingSink", "CollectingSink"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Diagnostic:
    filename:    str
    line_number: int
    cheat_name:  Optional[str]
    problem:     str
    line_text:   Optional[str] = None

    def __str__(self) -> str:
        where = f"{self.filename}:{self.line_number}"
        if self.cheat_name:
            where += f' in cheat "{self.cheat_name}"'
        text = f" | {self.line_text}" if self.line_text is not None else ""
        return f"{where}: {self.problem}{text}"


class DiagnosticSink(Protocol):
    def report(self, diagnostic: Diagnostic) -> None: ...


class LoggingSink:
    """Default sink: every diagnostic becomes a logger warning."""

    def report(self, diagnostic: Diagnostic) -> None:
        logger.warning("Cheat file %s is malformed: %s", diagnostic.filename, diagnostic)


class CollectingSink:
    """Keeps diagnostics in memory, e.g. for a UI summary or for tests."""

    def __init__(self) -> None:
        self.diagnostics: list[Diagnostic] = []

    def report(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)

    @property
    def problems(self) -> list[str]:
        return [d.problem for d in self.diagnostics]

    def __len__(self) -> int:
        return len(self.diagnostics)
