"""
Project-wide custom exception hierarchy.
All modules raise subclasses of CheatLoaderError — never bare Exception.

A missing cheat source is not an error: lookups return None for it.
"""

__all__ = [
    "CheatLoaderError",
    "CheatFormatError",
    "StructuralError",
    "GenieCodeError",
    "AcquisitionError",
    "ArchiveError",
    "EncodingDetectionError",
    "SessionError",
]


class CheatLoaderError(Exception):
    """Root exception for all cheat-loader errors."""


# ── Format backends ───────────────────────────────────────────────────────────

class CheatFormatError(CheatLoaderError):
    """Raised when a cheat source cannot be parsed."""


class StructuralError(CheatFormatError):
    """
    Raised inside the .ini backend when the block structure is broken
    (bracket mismatch, directive outside a cheat block).
    Aborts the remainder of the file being parsed.
    """

    def __init__(self, problem: str, line_number: int = 0, line_text: str | None = None) -> None:
        super().__init__(problem)
        self.problem = problem
        self.line_number = line_number
        self.line_text = line_text


# ── Game Genie ────────────────────────────────────────────────────────────────

class GenieCodeError(CheatLoaderError, ValueError):
    """Raised for out-of-range cipher input or an undecodable code string."""


# ── Content acquisition ───────────────────────────────────────────────────────

class AcquisitionError(CheatLoaderError):
    """Base class for content acquisition errors."""


class ArchiveError(AcquisitionError):
    """Raised when a cheat archive cannot be opened, listed or extracted."""


class EncodingDetectionError(AcquisitionError):
    """Raised when a configured legacy codec is unknown to Python."""


# ── Session ───────────────────────────────────────────────────────────────────

class SessionError(CheatLoaderError):
    """Raised when a session is reused for a different game without reset()."""
