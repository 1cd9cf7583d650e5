from .base import AbstractBackend, BackendKind, get_backend
from .diagnostics import CollectingSink, Diagnostic, DiagnosticSink, LoggingSink
from .ini import IniBackend
from .mame_dat import MameDatBackend, extract_driver_lines
from .nebula_dat import NebulaDatBackend
from .vct import VctBackend

__all__ = [
    "AbstractBackend",
    "BackendKind",
    "get_backend",
    "CollectingSink",
    "Diagnostic",
    "DiagnosticSink",
    "LoggingSink",
    "IniBackend",
    "MameDatBackend",
    "extract_driver_lines",
    "NebulaDatBackend",
    "VctBackend",
]
