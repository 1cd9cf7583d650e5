"""Abstract base class and factory for all cheat format backends."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from src.database.models import CheatDatabase, CheatEntry
from src.driver.models import DriverContext
from .diagnostics import Diagnostic, DiagnosticSink, LoggingSink

__all__ = ["BackendKind", "AbstractBackend", "get_backend"]


class BackendKind(str, Enum):
    MAME_DAT   = "mame_dat"
    NEBULA_DAT = "nebula_dat"
    INI        = "ini"
    VCT        = "vct"


class AbstractBackend(ABC):
    """
    All format backends implement this interface.
    The factory function get_backend() selects the right implementation.
    """

    kind: BackendKind

    def __init__(self, sink: Optional[DiagnosticSink] = None, heading: bool = False) -> None:
        """
        Args:
            sink:    Receives one Diagnostic per malformed record.
                     Defaults to a sink that logs warnings.
            heading: Insert a non-selectable heading entry naming the
                     source file before its first cheat.
        """
        self._sink = sink if sink is not None else LoggingSink()
        self._heading = heading

    @abstractmethod
    def parse(
        self,
        content: str,
        context: DriverContext,
        database: CheatDatabase,
        source: str,
    ) -> int:
        """
        Parse *content* and append its cheats to *database*.

        Args:
            content:  Decoded text of the cheat source.
            context:  Current driver (ROM names, hardware family).
            database: Database the entries are appended to.
            source:   File name used in diagnostics and heading entries.

        Returns:
            The number of entries appended (heading entries excluded).
        """
        ...

    # ── Shared helpers ────────────────────────────────────────────────────────

    def _report(
        self,
        source: str,
        line_number: int,
        entry: Optional[CheatEntry],
        problem: str,
        line_text: Optional[str] = None,
    ) -> None:
        self._sink.report(Diagnostic(
            filename=source,
            line_number=line_number,
            cheat_name=entry.name if entry is not None else None,
            problem=problem,
            line_text=line_text,
        ))

    def _add_entry(
        self,
        database: CheatDatabase,
        entry: CheatEntry,
        source: str,
        first: bool,
    ) -> CheatEntry:
        """Append *entry*, preceded by the source heading on the first call."""
        if first and self._heading:
            database.append(CheatEntry(name=source, is_heading=True, source=source))
        entry.source = source
        database.append(entry)
        return entry


def get_backend(
    kind: BackendKind,
    sink: Optional[DiagnosticSink] = None,
    heading: bool = False,
    **kwargs,
) -> "AbstractBackend":
    """
    Factory: return a fresh backend for *kind*.

    Import is deferred to avoid circular imports between sub-modules.
    Extra keyword arguments are passed to the backend constructor.
    """
    from .ini import IniBackend
    from .mame_dat import MameDatBackend
    from .nebula_dat import NebulaDatBackend
    from .vct import VctBackend

    backends: dict[BackendKind, type[AbstractBackend]] = {
        BackendKind.MAME_DAT:   MameDatBackend,
        BackendKind.NEBULA_DAT: NebulaDatBackend,
        BackendKind.INI:        IniBackend,
        BackendKind.VCT:        VctBackend,
    }
    return backends[BackendKind(kind)](sink=sink, heading=heading, **kwargs)
