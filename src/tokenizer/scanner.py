"""
Low-level text scanning helpers shared by the cheat format backends.

Each helper takes the unparsed remainder of a line and returns what it
read together with the new remainder, so callers can chain them the way a
hand-written scanner would advance a cursor.
"""

import re
from typing import Optional

from src.database.models import truncate_name

__all__ = [
    "skip_whitespace",
    "label_check",
    "quote_read",
    "skip_comma",
    "parse_c_integer",
    "parse_hex",
    "is_comment",
    "strip_line_ending",
    "iter_lines",
]

# strtol(base=0): 0x-prefixed hex, 0-prefixed octal, otherwise decimal
_C_INT_RE = re.compile(r"\s*([+-]?)(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)")
# sscanf("%x"): optional 0x prefix, then hex digits
_HEX_RE   = re.compile(r"\s*([+-]?)(?:0[xX])?([0-9a-fA-F]+)")


def skip_whitespace(s: str) -> str:
    return s.lstrip()


def label_check(s: str, label: str) -> Optional[str]:
    """Return the text after *label* if the line starts with it, else None."""
    s = skip_whitespace(s)
    if s.startswith(label):
        return s[len(label):]
    return None


def quote_read(s: str) -> Optional[tuple[str, str]]:
    """
    Read a double-quoted string, or a bare word when no quote is present.

    Returns (text, rest) with text clipped to the name length limit, or
    None when nothing could be read (empty input, unterminated quote).
    """
    s = skip_whitespace(s)
    if not s:
        return None
    if s[0] == '"':
        end = s.find('"', 1)
        if end == -1:
            return None
        return truncate_name(s[1:end]), s[end + 1:]

    end = 0
    while end < len(s) and not s[end].isspace() and s[end] != ",":
        end += 1
    if end == 0:
        return None
    return truncate_name(s[:end]), s[end:]


def skip_comma(s: str) -> tuple[bool, str]:
    """
    Advance past the next comma.
    Returns (more, rest) where *more* is True if non-blank text remains
    afterwards.
    """
    idx = s.find(",")
    rest = "" if idx == -1 else s[idx + 1:]
    return bool(rest.strip()), rest


def parse_c_integer(s: str) -> Optional[tuple[int, str]]:
    """
    Parse an integer with C strtol(base=0) rules.
    Returns (value, rest) or None when no digits were consumed.
    """
    m = _C_INT_RE.match(s)
    if not m:
        return None
    sign, digits = m.group(1), m.group(2)
    if digits[:2].lower() == "0x":
        value = int(digits, 16)
    elif len(digits) > 1 and digits[0] == "0":
        value = int(digits, 8)
    else:
        value = int(digits, 10)
    return (-value if sign == "-" else value), s[m.end():]


def parse_hex(s: str) -> int:
    """
    Parse the leading hexadecimal number of a field.

    Raises:
        ValueError: the field holds no hex digit.
    """
    m = _HEX_RE.match(s)
    if not m:
        raise ValueError(f"not a hexadecimal value: {s!r}")
    value = int(m.group(2), 16)
    return -value if m.group(1) == "-" else value


def is_comment(line: str, markers: tuple[str, ...] = ("//",)) -> bool:
    """True if *line* starts (at column 0) with one of the comment markers."""
    return line.startswith(markers)


def strip_line_ending(line: str) -> str:
    return line.rstrip("\r\n")


def iter_lines(text: str, max_length: Optional[int] = None):
    """
    Yield (line_number, line) pairs with line endings removed.
    Lines longer than *max_length* are clipped to that length.
    """
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    for number, raw in enumerate(lines, start=1):
        line = strip_line_ending(raw)
        if max_length is not None and len(line) > max_length:
            line = line[:max_length]
        yield number, line
