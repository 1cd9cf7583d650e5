"""
Data models for the cheat database — the unified output of every backend.

Key concepts
────────────
AddressPatch  — one memory write (cpu, address, value[, mask]) or a Game Genie code
CheatOption   — one selectable variant of a cheat, bundling its patches
CheatEntry    — one named cheat with a sparse, index-addressed option table
CheatDatabase — insertion-ordered list of entries for the loaded game
"""

from dataclasses import dataclass, field
from typing import Iterator, Optional

__all__ = [
    "MAX_NAME_LENGTH",
    "MAX_OPTIONS",
    "MAX_ADDRESSES",
    "DISABLED",
    "GENIE_MARKER_ADDRESS",
    "truncate_name",
    "AddressPatch",
    "CheatOption",
    "CheatEntry",
    "CheatDatabase",
]

# Name buffers hold 128 characters including the terminator
MAX_NAME_LENGTH = 127
MAX_OPTIONS     = 512
MAX_ADDRESSES   = 64

# selected_option value for a cheat that is switched off
DISABLED = -1

# Patches carrying a Game Genie code still need a non-zero address
GENIE_MARKER_ADDRESS = 0xFFFF


def truncate_name(text: str) -> str:
    """Clip a display label to MAX_NAME_LENGTH characters."""
    return text[:MAX_NAME_LENGTH]


@dataclass
class AddressPatch:
    """
    One atomic patch instruction.

    When `is_relative` is set, `address` is a base: the consumer reads a
    pointer from it and adds `relative_offset` at apply time.
    When `genie_code` is set, `address` only holds GENIE_MARKER_ADDRESS.
    """
    cpu_index:        int = 0
    address:          int = 0
    value:            int = 0
    mask:             int = 0
    extended:         int = 0          # raw attribute word (compare field)
    multi_byte_index: int = 0
    total_bytes:      int = 1
    is_relative:      bool = False
    relative_offset:  int = 0
    relative_bits:    int = 0
    genie_code:       Optional[str] = None

    @classmethod
    def genie(cls, code: str) -> "AddressPatch":
        """Build a self-contained Game Genie patch."""
        return cls(address=GENIE_MARKER_ADDRESS, genie_code=code)

    def __str__(self) -> str:
        if self.genie_code is not None:
            return f"AddressPatch(genie={self.genie_code})"
        rel = f" rel+0x{self.relative_offset:X}" if self.is_relative else ""
        return (
            f"AddressPatch(cpu={self.cpu_index}, 0x{self.address:08X}"
            f"=0x{self.value:02X}{rel})"
        )


@dataclass
class CheatOption:
    name:    str
    patches: list[AddressPatch] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.name = truncate_name(self.name)

    def add_patch(self, patch: AddressPatch) -> bool:
        """Append *patch*; returns False once MAX_ADDRESSES is reached."""
        if len(self.patches) >= MAX_ADDRESSES:
            return False
        self.patches.append(patch)
        return True

    @property
    def is_full(self) -> bool:
        return len(self.patches) >= MAX_ADDRESSES


@dataclass
class CheatEntry:
    """
    One named cheat.

    `options` is sparse: indices come from the source format and need not
    be contiguous. Index 0 is normally the "Disabled" option.
    """
    name:                  str
    kind:                  int  = 0        # 0 = apply every frame
    selected_option:       int  = DISABLED
    default_option:        int  = 0
    one_shot:              bool = False
    wait_for_modification: int  = 0        # 0 none, 1 wait for change, 2 compare extended
    restore_on_disable:    bool = False
    write_with_mask:       bool = False
    watch_mode:            bool = False
    prefill_mode:          int  = 0        # 0–3
    options:               dict[int, CheatOption] = field(default_factory=dict)
    is_heading:            bool = False
    source:                str  = ""

    def __post_init__(self) -> None:
        self.name = truncate_name(self.name)

    def set_option(self, index: int, option: CheatOption) -> bool:
        """
        Store *option* at *index*, replacing any option already there.
        Returns False (and stores nothing) when the index is out of range.
        """
        if not 0 <= index < MAX_OPTIONS:
            return False
        self.options[index] = option
        return True

    def option(self, index: int) -> Optional[CheatOption]:
        return self.options.get(index)

    def ordered_options(self) -> list[tuple[int, CheatOption]]:
        """Options sorted by index, as a menu would list them."""
        return sorted(self.options.items())

    @property
    def selectable(self) -> bool:
        return not self.is_heading

    def __str__(self) -> str:
        return f"CheatEntry({self.name!r}, options={len(self.options)})"


class CheatDatabase:
    """
    Ordered collection of CheatEntry for one game session.

    Display order equals load order. The session rebuilds the database
    from scratch on every load; only `selected_option` is changed later.
    """

    def __init__(self) -> None:
        self._entries: list[CheatEntry] = []

    def append(self, entry: CheatEntry) -> int:
        """Append *entry* and return its index."""
        self._entries.append(entry)
        return len(self._entries) - 1

    def clear(self) -> None:
        self._entries.clear()

    def count(self) -> int:
        """Number of selectable entries (headings excluded)."""
        return sum(1 for e in self._entries if e.selectable)

    @property
    def available(self) -> bool:
        return self.count() > 0

    @property
    def entries(self) -> list[CheatEntry]:
        return list(self._entries)

    def find(self, name: str) -> Optional[CheatEntry]:
        """Case-insensitive lookup of the first entry called *name*."""
        name_lower = name.lower()
        for entry in self._entries:
            if entry.name.lower() == name_lower:
                return entry
        return None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CheatEntry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> CheatEntry:
        return self._entries[index]

    def __repr__(self) -> str:
        return f"CheatDatabase(entries={len(self._entries)})"
