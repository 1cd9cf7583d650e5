"""
database — in-memory cheat database shared by every format backend.

Public API
──────────
AddressPatch, CheatOption, CheatEntry  — dataclasses
CheatDatabase                          — ordered entry container
"""

from src.database.models import (
    DISABLED,
    GENIE_MARKER_ADDRESS,
    MAX_ADDRESSES,
    MAX_NAME_LENGTH,
    MAX_OPTIONS,
    AddressPatch,
    CheatDatabase,
    CheatEntry,
    CheatOption,
    truncate_name,
)

__all__ = [
    "DISABLED",
    "GENIE_MARKER_ADDRESS",
    "MAX_ADDRESSES",
    "MAX_NAME_LENGTH",
    "MAX_OPTIONS",
    "AddressPatch",
    "CheatDatabase",
    "CheatEntry",
    "CheatOption",
    "truncate_name",
]
