"""
MameDatBackend — MAME-style cheat.dat records.

Record layout (one per line, colon separated):

    :<driver>:<flags>:<address>:<value>:<attribute>:<description>

All numeric fields are hexadecimal. The control-flags word decides what a
record means:

    0x00004000  don't list            0x00000800  BCD value (both skipped)
    0x00008000  linked continuation   0x00010000  menu option / continuation
    0x00000001  one-shot              0x00000002  wait for modification
    0x00080000  compare extended      0x00800000  restore on disable
    0x00003000  prefill mode          0x00000006  watch only (both bits)
    0x00000100  generate numeric options (0x200: display +1, 0x400: start at 1)
    0x00300000  extra bytes (0–3)     0x1F000000  CPU index
    0xF0000000  == 0x80000000 → address is relative to a pointer

The whole multi-game file is first reduced to the lines of one driver with
extract_driver_lines(); parse() then walks just those lines.
"""

import logging
from typing import Optional

from src.database.models import (
    GENIE_MARKER_ADDRESS,
    AddressPatch,
    CheatDatabase,
    CheatEntry,
    CheatOption,
)
from src.driver.models import DriverContext, HardwareFamily
from src.tokenizer import iter_lines, parse_hex
from .base import AbstractBackend, BackendKind

__all__ = ["MameDatBackend", "extract_driver_lines", "build_patches"]

logger = logging.getLogger(__name__)

# ── Constants ─────────────────────────────────────────────────────────────────

_SECTION_END      = "----:REASON"
_NAME_FIELD_LIMIT = 255          # description field buffer
_MAX_GENERATED    = 0xFF         # upper bound for auto-generated option ranges
_JUNK_FLAGS       = 0x60000000
_MIDWAY_ROM_BASE  = 0xFF800000 >> 3

_FLAG_SKIP        = 0x00004800
_FLAG_LINKED      = 0x00008000
_FLAG_MENU        = 0x00010000
_FLAG_RANGE       = 0x00000100
_FLAG_RANGE_PLUS1 = 0x00000200
_FLAG_RANGE_START = 0x00000400


def _tag(driver: str) -> str:
    return f":{driver}:"


def extract_driver_lines(text: str, driver: str) -> Optional[str]:
    """
    Keep only the lines of *text* that belong to *driver*.

    Returns the matching lines joined with newlines, or None when the
    driver has no record in the file.
    """
    tag = _tag(driver)
    lines = [line for _, line in iter_lines(text) if line.startswith(tag)]
    if not lines:
        return None
    return "\n".join(lines) + "\n"


def build_patches(flags: int, address: int, value: int, attribute: int) -> list[AddressPatch]:
    """
    Slice one record into per-byte AddressPatch objects.

    Bytes are taken most significant first; byte i targets address + i
    unless the record is pointer-relative.
    """
    extra = (flags >> 20) & 3
    cpu = (flags >> 24) & 0x1F
    if cpu > 3:
        cpu = 0
    relative = (flags & 0xF0000000) == 0x80000000
    rel_bits = (flags & 0x3000000) >> 24 if relative else 0

    patches = []
    for i in range(extra + 1):
        shift = (extra - i) * 8
        patches.append(AddressPatch(
            cpu_index=cpu,
            address=address if relative else (address + i) & 0xFFFFFFFF,
            value=(value >> shift) & 0xFF,
            mask=(attribute >> shift) & 0xFF,
            extended=attribute,
            multi_byte_index=i,
            total_bytes=extra + 1,
            is_relative=relative,
            relative_offset=attribute if relative else 0,
            relative_bits=rel_bits,
        ))
    return patches


def _apply_entry_flags(entry: CheatEntry, flags: int, attribute: int) -> None:
    if (flags & 0x80018) == 0 and attribute != 0xFFFFFFFF:
        entry.write_with_mask = True          # attribute is the write mask
    if flags & 0x1:
        entry.one_shot = True
    if flags & 0x2:
        entry.wait_for_modification = 1
    if flags & 0x80000:
        entry.wait_for_modification = 2       # compare against extended field
    if flags & 0x800000:
        entry.restore_on_disable = True
    if flags & 0x3000:
        entry.prefill_mode = (flags & 0x3000) >> 12
    if (flags & 0x6) == 0x6:
        entry.watch_mode = True


class _Record:
    """One decoded cheat.dat line."""

    __slots__ = ("flags", "address", "value", "attribute", "name", "code")

    def __init__(self, flags: int, address: int, value: int, attribute: int,
                 name: str, code: str) -> None:
        self.flags = flags
        self.address = address
        self.value = value
        self.attribute = attribute
        self.name = name
        self.code = code


class MameDatBackend(AbstractBackend):
    """
    Builds cheat entries from the cheat.dat lines of one driver.

    On NES/SNES hardware the address column holds a Game Genie code
    which is stored verbatim instead of numeric patches.
    """

    kind = BackendKind.MAME_DAT

    def parse(
        self,
        content: str,
        context: DriverContext,
        database: CheatDatabase,
        source: str,
        driver_name: Optional[str] = None,
    ) -> int:
        """
        Args:
            driver_name: Record tag to match; defaults to the ROM name.
                         The session passes the parent name for clones.
        """
        tag = _tag(driver_name or context.rom_name)
        genie = context.hardware.uses_game_genie
        midway = context.hardware == HardwareFamily.MIDWAY

        entry: Optional[CheatEntry] = None
        n = 0
        menu = False
        found = False
        added = 0

        for line_number, line in iter_lines(content):
            if line.startswith(";"):
                continue
            if not line.startswith(tag):
                if found:
                    break
                continue
            if _SECTION_END in line:
                break
            found = True

            record = self._decode(line, line_number, source, entry, genie)
            if record is None:
                continue
            flags = record.flags

            if flags & _FLAG_SKIP:
                continue

            if (flags & 0xFF000000) == 0x39000000 and midway:
                record.address |= _MIDWAY_ROM_BASE

            # Branch order matters: a record carrying both 0x8000 and 0x10000
            # inside a menu is a linked continuation, not a new option.
            if flags & _FLAG_LINKED or (flags & _FLAG_MENU and not menu):
                option = entry.option(n) if entry is not None else None
                if option is None:
                    self._report(source, line_number, entry,
                                 "linked cheat without a preceding cheat", line)
                    continue
                self._add_patches(option, record, genie)
                continue

            if not flags & _FLAG_MENU:
                n = 0
                menu = False
                entry = self._add_entry(database, CheatEntry(name=record.name), source, added == 0)
                added += 1

                if not record.name or len(record.name) > _NAME_FIELD_LIMIT or flags == _JUNK_FLAGS:
                    n += 1
                    continue

                entry.set_option(0, CheatOption("Disabled"))

                if not (record.address or genie):
                    menu = True
                    continue

                _apply_entry_flags(entry, flags, record.attribute)
                if flags & _FLAG_RANGE:
                    n = self._add_range(entry, record, genie, n, source, line_number, line)
                else:
                    n += 1
                    option = CheatOption(record.name)
                    self._add_patches(option, record, genie)
                    entry.set_option(n, option)
                continue

            # menu option
            n += 1
            _apply_entry_flags(entry, flags, record.attribute)
            option = CheatOption(record.name)
            self._add_patches(option, record, genie)
            entry.set_option(n, option)

        logger.debug("%s: %d cheats for %s", source, added, tag)
        return added

    # ── Record handling ───────────────────────────────────────────────────────

    def _decode(
        self,
        line: str,
        line_number: int,
        source: str,
        entry: Optional[CheatEntry],
        genie: bool,
    ) -> Optional[_Record]:
        fields = line.split(":")
        if len(fields) < 7:
            self._report(source, line_number, entry, "missing fields", line)
            return None
        try:
            flags = parse_hex(fields[2]) & 0xFFFFFFFF
            value = parse_hex(fields[4]) & 0xFFFFFFFF
            attribute = parse_hex(fields[5]) & 0xFFFFFFFF
            if genie:
                try:
                    address = parse_hex(fields[3]) & 0xFFFFFFFF
                except ValueError:
                    address = 0
            else:
                address = parse_hex(fields[3]) & 0xFFFFFFFF
        except ValueError:
            self._report(source, line_number, entry, "invalid hexadecimal field", line)
            return None
        return _Record(flags, address, value, attribute, fields[6], fields[3].strip())

    def _add_range(
        self,
        entry: CheatEntry,
        record: _Record,
        genie: bool,
        n: int,
        source: str,
        line_number: int,
        line: str,
    ) -> int:
        """Generate the numbered options '# 1.', '# 2.', ... for one record."""
        total = record.value + 1
        plus1 = 1 if record.flags & _FLAG_RANGE_PLUS1 else 0
        start = 1 if record.flags & _FLAG_RANGE_START else 0

        if total > _MAX_GENERATED:
            self._report(source, line_number, entry,
                         f"too many generated options ({total})", line)
            return n

        for value in range(start, total):
            n += 1
            option = CheatOption(f"# {value + plus1}.")
            if genie:
                option.add_patch(self._genie_patch(record))
            else:
                for patch in build_patches(record.flags, record.address, value, record.attribute):
                    option.add_patch(patch)
            entry.set_option(n, option)
        return n

    def _add_patches(self, option: CheatOption, record: _Record, genie: bool) -> None:
        if genie:
            option.add_patch(self._genie_patch(record))
            return
        for patch in build_patches(record.flags, record.address, record.value, record.attribute):
            if not option.add_patch(patch):
                break

    @staticmethod
    def _genie_patch(record: _Record) -> AddressPatch:
        return AddressPatch(address=GENIE_MARKER_ADDRESS, total_bytes=1, genie_code=record.code)
