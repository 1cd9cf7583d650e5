"""Data models describing the loaded game driver."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

__all__ = ["HardwareFamily", "DriverContext"]


class HardwareFamily(str, Enum):
    NES     = "nes"
    FDS     = "fds"
    SNES    = "snes"
    MIDWAY  = "midway"
    ARCADE  = "arcade"
    OTHER   = "other"

    @property
    def is_famicom(self) -> bool:
        """NES and Famicom Disk System share the .vct format."""
        return self in (HardwareFamily.NES, HardwareFamily.FDS)

    @property
    def uses_game_genie(self) -> bool:
        return self in (HardwareFamily.NES, HardwareFamily.FDS, HardwareFamily.SNES)


@dataclass
class DriverContext:
    """
    Metadata about the current ROM set, supplied by the host emulator.
    Passed to every backend and to the content resolver.
    """
    rom_name:    str
    parent_name: Optional[str] = None
    hardware:    HardwareFamily = HardwareFamily.OTHER
    is_clone:    bool = False

    @property
    def has_parent(self) -> bool:
        """True when clone fallback to the parent's cheats is allowed."""
        return self.is_clone and bool(self.parent_name)

    def candidate_names(self) -> list[str]:
        """ROM names to try, exact name first, then the parent."""
        names = [self.rom_name]
        if self.has_parent and self.parent_name != self.rom_name:
            names.append(self.parent_name)  # type: ignore[arg-type]
        return names

    def __str__(self) -> str:
        parent = f" (clone of {self.parent_name})" if self.has_parent else ""
        return f"{self.rom_name}{parent} [{self.hardware.value}]"
