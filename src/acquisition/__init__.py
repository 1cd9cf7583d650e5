"""
acquisition — locating cheat sources and turning their bytes into text.

Public API
──────────
CheatResolver     — file / parent / archive lookup for a driver
CheatArchive      — scoped zip / 7z reader with case-insensitive lookup
detect_encoding   — UTF-8 validation with legacy code page fallback
decode_content    — bytes → TextContent
"""

from src.acquisition.archive import CheatArchive
from src.acquisition.encoding import decode_content, detect_encoding, is_valid_utf8
from src.acquisition.models import DetectedEncoding, TextContent
from src.acquisition.resolver import CheatResolver

__all__ = [
    "CheatArchive",
    "CheatResolver",
    "DetectedEncoding",
    "TextContent",
    "decode_content",
    "detect_encoding",
    "is_valid_utf8",
]
