from .scanner import (
    is_comment,
    iter_lines,
    label_check,
    parse_c_integer,
    parse_hex,
    quote_read,
    skip_comma,
    skip_whitespace,
    strip_line_ending,
)

__all__ = [
    "is_comment",
    "iter_lines",
    "label_check",
    "parse_c_integer",
    "parse_hex",
    "quote_read",
    "skip_comma",
    "skip_whitespace",
    "strip_line_ending",
]
