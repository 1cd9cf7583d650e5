"""
Game Genie code cipher for NES/Famicom-family hardware.

A code packs a 16-bit address, an 8-bit value and an optional 8-bit
compare byte into 6 (no compare) or 8 (compare) letters. Each letter
carries one 4-bit nibble:

    nibble  bit 3                 bits 2-0
    ──────  ────────────────────  ──────────────────
    1       value bit 7           value bits 2-0
    2       address bit 7         value bits 6-4
    3       compare present       address bits 6-4
    4       address bit 3         address bits 14-12
    5       address bit 11        address bits 2-0
    6       value/compare bit 3   address bits 10-8
    7       compare bit 7         compare bits 2-0
    8       value bit 3           compare bits 6-4

Address bit 15 is not stored in any nibble: the letter case carries it
(upper case when set).
"""

from dataclasses import dataclass
from typing import Optional

from src.exceptions import GenieCodeError

__all__ = ["ALPHABET_UPPER", "ALPHABET_LOWER", "GenieCode", "encode", "decode"]

ALPHABET_UPPER = "APZLGITYEOXUKSVN"
ALPHABET_LOWER = ALPHABET_UPPER.lower()

_LETTER_TO_NIBBLE = {c: i for i, c in enumerate(ALPHABET_UPPER)}


def _bit(x: int, n: int) -> int:
    return (x >> n) & 1


def _nibbles(address: int, value: int, compare: Optional[int]) -> list[int]:
    has_compare = compare is not None
    nibbles = [
        _bit(value, 7) << 3   | (value & 7),
        _bit(address, 7) << 3 | ((value >> 4) & 7),
        int(has_compare) << 3 | ((address >> 4) & 7),
        _bit(address, 3) << 3 | ((address >> 12) & 7),
        _bit(address, 11) << 3 | (address & 7),
    ]
    if not has_compare:
        nibbles.append(_bit(value, 3) << 3 | ((address >> 8) & 7))
        return nibbles
    nibbles += [
        _bit(compare, 3) << 3 | ((address >> 8) & 7),
        _bit(compare, 7) << 3 | (compare & 7),
        _bit(value, 3) << 3   | ((compare >> 4) & 7),
    ]
    return nibbles


def encode(address: int, value: int, compare: Optional[int] = None) -> str:
    """
    Encode an (address, value[, compare]) triple as a Game Genie code.

    Returns a 6-letter code without *compare*, 8 letters with it.

    Raises:
        GenieCodeError: an argument is outside its 16/8-bit range.
    """
    if not 0 <= address <= 0xFFFF:
        raise GenieCodeError(f"address out of range: {address:#x}")
    if not 0 <= value <= 0xFF:
        raise GenieCodeError(f"value out of range: {value:#x}")
    if compare is not None and not 0 <= compare <= 0xFF:
        raise GenieCodeError(f"compare out of range: {compare:#x}")

    nibbles = _nibbles(address, value, compare)
    packed = 0
    for nibble in nibbles:
        packed = (packed << 4) | nibble

    alphabet = ALPHABET_UPPER if address & 0x8000 else ALPHABET_LOWER
    letters = []
    for shift in range((len(nibbles) - 1) * 4, -1, -4):
        letters.append(alphabet[(packed >> shift) & 0xF])
    return "".join(letters)


def decode(code: str) -> tuple[int, int, Optional[int]]:
    """
    Decode a 6- or 8-letter Game Genie code into (address, value, compare).
    *compare* is None for 6-letter codes.

    Raises:
        GenieCodeError: wrong length or a letter outside the alphabet.
    """
    if len(code) not in (6, 8):
        raise GenieCodeError(f"Game Genie code must have 6 or 8 letters: {code!r}")
    try:
        n = [_LETTER_TO_NIBBLE[c.upper()] for c in code]
    except KeyError as exc:
        raise GenieCodeError(f"invalid Game Genie letter {exc.args[0]!r} in {code!r}") from exc

    address = 0x8000 if code[0].isupper() else 0
    address |= (n[1] >> 3) << 7
    address |= (n[2] & 7) << 4
    address |= (n[3] >> 3) << 3
    address |= (n[3] & 7) << 12
    address |= (n[4] >> 3) << 11
    address |= n[4] & 7
    address |= (n[5] & 7) << 8

    value = (n[0] >> 3) << 7 | (n[0] & 7) | (n[1] & 7) << 4

    if len(code) == 6:
        value |= (n[5] >> 3) << 3
        return address, value, None

    value |= (n[7] >> 3) << 3
    compare = (n[5] >> 3) << 3 | (n[6] >> 3) << 7 | (n[6] & 7) | (n[7] & 7) << 4
    return address, value, compare


@dataclass(frozen=True)
class GenieCode:
    """Decoded form of a Game Genie code."""
    address: int
    value:   int
    compare: Optional[int] = None

    @classmethod
    def from_code(cls, code: str) -> "GenieCode":
        return cls(*decode(code))

    def encode(self) -> str:
        return encode(self.address, self.value, self.compare)

    def __str__(self) -> str:
        cmp = f" if 0x{self.compare:02X}" if self.compare is not None else ""
        return f"0x{self.address:04X} = 0x{self.value:02X}{cmp}"
