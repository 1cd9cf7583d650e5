"""
Text encoding detection for cheat sources.

Cheat files come from many hands: some are UTF-8, most older ones use a
Windows code page. Bytes that pass a strict UTF-8 check (no overlong
forms, no surrogates, nothing above U+10FFFF, no stray continuation
bytes) are UTF-8; everything else is treated as a legacy encoding,
guessed with chardet when it is confident enough.
"""

import codecs
import logging

import chardet

from src.exceptions import EncodingDetectionError
from .models import DetectedEncoding, TextContent

__all__ = ["is_valid_utf8", "detect_encoding", "decode_content"]

logger = logging.getLogger(__name__)

# Below this chardet score the configured legacy codec is used instead
MIN_LEGACY_CONFIDENCE = 0.5


def is_valid_utf8(data: bytes) -> bool:
    """True if *data* is well-formed UTF-8 (Python's decoder is strict)."""
    try:
        data.decode("utf-8", errors="strict")
    except UnicodeDecodeError:
        return False
    return True


def _codec_name(name: str) -> str:
    try:
        return codecs.lookup(name).name
    except LookupError as exc:
        raise EncodingDetectionError(f"Unknown text encoding: {name}") from exc


def detect_encoding(data: bytes, legacy_encoding: str = "cp1252") -> DetectedEncoding:
    """
    Classify *data* as UTF-8 or legacy and pick the codec to decode it.

    Raises:
        EncodingDetectionError: *legacy_encoding* is not a known codec.
    """
    fallback = _codec_name(legacy_encoding)

    if data.startswith(codecs.BOM_UTF8) and is_valid_utf8(data[len(codecs.BOM_UTF8):]):
        return DetectedEncoding("utf-8-sig", 1.0, True)
    if is_valid_utf8(data):
        return DetectedEncoding("utf-8", 1.0, True)

    guess = chardet.detect(data)
    name = guess.get("encoding")
    confidence = guess.get("confidence") or 0.0
    if name and confidence >= MIN_LEGACY_CONFIDENCE:
        try:
            codec = _codec_name(name)
        except EncodingDetectionError:
            codec = ""
        if codec and not codec.startswith("utf"):
            logger.debug("Legacy encoding guessed: %s (%.2f)", codec, confidence)
            return DetectedEncoding(codec, confidence, False)

    return DetectedEncoding(fallback, confidence, False)


def decode_content(data: bytes, legacy_encoding: str = "cp1252", source: str = "") -> TextContent:
    """Detect the encoding of *data* and decode it to text."""
    encoding = detect_encoding(data, legacy_encoding)
    text = data.decode(encoding.name, errors="replace")
    logger.debug("Decoded %s as %s", source or "<buffer>", encoding)
    return TextContent(text=text, encoding=encoding, source=source)
