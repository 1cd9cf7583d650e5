"""
NebulaDatBackend — per-game Nebula cheat files (<rom>.dat).

Example::

    [Cheat1]
    Name=Infinite Lives
    Default=0
    0=Off
    1=On,0010,63

Addresses are 16-bit word addresses: the stored byte address is the
file address XOR 1. Every patch targets CPU 0.
"""

import logging
import re
from typing import Optional

from src.database.models import (
    MAX_ADDRESSES,
    AddressPatch,
    CheatDatabase,
    CheatEntry,
    CheatOption,
)
from src.driver.models import DriverContext
from src.tokenizer import iter_lines, parse_hex
from .base import AbstractBackend, BackendKind

__all__ = ["NebulaDatBackend"]

logger = logging.getLogger(__name__)

_DEFAULT_RE = re.compile(r"\s*([+-]?\d+)")

# "=" must appear within the first few characters to count as a label separator
_LABEL_LIMIT = 4


def _split_option_line(line: str) -> tuple[str, list[str]]:
    """
    Split an option line into (name, address/value fields).

    Accepted forms::

        1=On,0010,63        numeric label, name after '='
        On=00,0010,63       short textual label is the name; first field is a CPU column
        On,0010,63          name up to the first comma
    """
    idx = line.find("=")
    if 0 <= idx < _LABEL_LIMIT:
        label, body = line[:idx], line[idx + 1:]
        fields = body.split(",")
        if label.strip().isdigit():
            return fields[0], fields[1:]
        return label, fields[1:]

    fields = line.split(",")
    return fields[0], fields[1:]


class NebulaDatBackend(AbstractBackend):

    kind = BackendKind.NEBULA_DAT

    def parse(
        self,
        content: str,
        context: DriverContext,
        database: CheatDatabase,
        source: str,
    ) -> int:
        entry: Optional[CheatEntry] = None
        n = 0
        added = 0

        for line_number, line in iter_lines(content):
            if len(line.strip()) < 2 or line.startswith("["):
                continue

            if line.startswith("Name="):
                n = 0
                entry = self._add_entry(database, CheatEntry(name=line[5:]), source, added == 0)
                added += 1
                continue

            if line.startswith("Default="):
                if entry is None:
                    self._report(source, line_number, None, "default outside a cheat", line)
                    continue
                m = _DEFAULT_RE.match(line[8:])
                if m is None:
                    self._report(source, line_number, entry, "invalid default option", line)
                    continue
                entry.default_option = int(m.group(1))
                continue

            if entry is None:
                self._report(source, line_number, None, "option outside a cheat", line)
                continue

            index = n
            n += 1
            option = self._parse_option(line, line_number, source, entry)
            if option is not None:
                entry.set_option(index, option)

        logger.debug("%s: %d Nebula cheats", source, added)
        return added

    def _parse_option(
        self,
        line: str,
        line_number: int,
        source: str,
        entry: CheatEntry,
    ) -> Optional[CheatOption]:
        name, fields = _split_option_line(line)
        if fields and not fields[-1].strip():
            fields = fields[:-1]                    # trailing comma

        option = CheatOption(name)
        try:
            for i in range(0, len(fields) - 1, 2):
                if len(option.patches) >= MAX_ADDRESSES:
                    break
                address = parse_hex(fields[i])
                value = parse_hex(fields[i + 1])
                option.add_patch(AddressPatch(cpu_index=0, address=address ^ 1, value=value & 0xFF))
        except ValueError:
            self._report(source, line_number, entry, "invalid address or value", line)
            return None
        return option
