"""
VctBackend — VirtuaNES cheat files (<rom>.vct), NES/Famicom only.

Each line holds a cheat name and a code column ``AAAA-FF-DD``:

    AAAA  hex CPU address
    FF    hex flags: low nibble = byte count (1–4), bits 4–5 = compare mode
    DD    hex data, least significant byte at AAAA

Every data byte becomes a 6-letter Game Genie code followed by the compare
mode digit (0 always, 1 once, 2 greater than, 3 less than), which the
cheat application layer interprets.
"""

import logging
import re
from enum import IntEnum
from typing import Optional

from src.database.models import (
    GENIE_MARKER_ADDRESS,
    AddressPatch,
    CheatDatabase,
    CheatEntry,
    CheatOption,
)
from src.driver.models import DriverContext
from src.genie import encode
from src.tokenizer import is_comment, iter_lines
from .base import AbstractBackend, BackendKind

__all__ = ["VctBackend", "CompareMode"]

logger = logging.getLogger(__name__)

_CODE_RE = re.compile(r"^([0-9A-Fa-f]+)-([0-9A-Fa-f]+)-([0-9A-Fa-f]+)$")
_COMMENT_MARKERS = ("#", ";", "//")


class CompareMode(IntEnum):
    ALWAYS       = 0
    ONCE         = 1
    GREATER_THAN = 2
    LESS_THAN    = 3


class VctBackend(AbstractBackend):

    kind = BackendKind.VCT

    def parse(
        self,
        content: str,
        context: DriverContext,
        database: CheatDatabase,
        source: str,
    ) -> int:
        if not context.hardware.is_famicom:
            logger.debug("%s: .vct cheats only apply to NES/Famicom drivers", source)
            return 0

        added = 0
        for line_number, line in iter_lines(content):
            stripped = line.strip()
            if not stripped or is_comment(stripped, _COMMENT_MARKERS):
                continue

            tokens = stripped.split()
            code_idx = next((i for i, tok in enumerate(tokens) if _CODE_RE.match(tok)), None)
            if code_idx is None:
                self._report(source, line_number, None, "missing address-flags-data column", line)
                continue
            code_text = tokens.pop(code_idx)
            name = " ".join(tokens) or code_text

            option = self._build_option(name, code_text, line, line_number, source)
            if option is None:
                continue
            mode = (int(code_text.split("-")[1], 16) >> 4) & 3

            entry = CheatEntry(name=name, one_shot=mode == CompareMode.ONCE)
            entry.set_option(0, CheatOption("Disabled"))
            entry.set_option(1, option)
            self._add_entry(database, entry, source, added == 0)
            added += 1

        logger.debug("%s: %d VirtuaNES cheats", source, added)
        return added

    def _build_option(self, name: str, code_text: str, line: str, line_number: int,
                      source: str) -> Optional[CheatOption]:
        address_hex, flags_hex, data_hex = _CODE_RE.match(code_text).groups()
        address = int(address_hex, 16)
        flags = int(flags_hex, 16)
        data = int(data_hex, 16)

        count = min(max(flags & 0x0F, 1), 4)
        mode = (flags >> 4) & 3
        if address + count - 1 > 0xFFFF:
            self._report(source, line_number, None, "address out of range", line)
            return None

        option = CheatOption(name)
        for i in range(count):
            byte = (data >> (8 * i)) & 0xFF
            option.add_patch(AddressPatch(
                address=GENIE_MARKER_ADDRESS,
                multi_byte_index=i,
                total_bytes=count,
                genie_code=f"{encode(address + i, byte)}{mode}",
            ))
        return option
