"""Data models for the content acquisition layer."""

from dataclasses import dataclass

__all__ = ["DetectedEncoding", "TextContent"]


@dataclass(frozen=True)
class DetectedEncoding:
    """
    Result of encoding detection.

    name       — Python codec name used to decode the bytes
    confidence — 1.0 for validated UTF-8, the detector's score otherwise
    is_utf8    — False means the legacy (narrow) code page path was taken
    """
    name:       str
    confidence: float
    is_utf8:    bool

    def __str__(self) -> str:
        kind = "utf-8" if self.is_utf8 else "legacy"
        return f"{self.name} ({kind}, {self.confidence:.2f})"


@dataclass
class TextContent:
    """Decoded cheat source handed to a backend."""
    text:     str
    encoding: DetectedEncoding
    source:   str = ""          # file name, or "<entry>(<archive>)"
