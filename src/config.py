"""
Runtime configuration for the cheat loader.

Values come from the host front-end (or the CLI); from_env() offers the
same settings through environment variables.
"""

import os
from dataclasses import dataclass
from pathlib import Path

__all__ = ["LoaderConfig"]

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class LoaderConfig:
    """Where cheat files live and how they are read."""
    cheats_path:       str  = "cheats"
    archive_name:      str  = "cheat"               # cheat.zip / cheat.7z
    wayder_filename:   str  = "wayder_cheat.dat"
    legacy_encoding:   str  = "cp1252"             # used when content is not UTF-8
    heading_entries:   bool = False                # off when the front-end attributes files itself
    max_include_depth: int  = 5

    @property
    def cheats_dir(self) -> Path:
        return Path(self.cheats_path).expanduser()

    @classmethod
    def from_env(cls, **overrides) -> "LoaderConfig":
        """
        Build a config from CHEAT_LOADER_* environment variables.
        Keyword arguments take precedence over the environment.
        """
        env = os.environ
        values: dict = {}
        if "CHEAT_LOADER_PATH" in env:
            values["cheats_path"] = env["CHEAT_LOADER_PATH"]
        if "CHEAT_LOADER_ARCHIVE" in env:
            values["archive_name"] = env["CHEAT_LOADER_ARCHIVE"]
        if "CHEAT_LOADER_LEGACY_ENCODING" in env:
            values["legacy_encoding"] = env["CHEAT_LOADER_LEGACY_ENCODING"]
        if "CHEAT_LOADER_HEADINGS" in env:
            values["heading_entries"] = env["CHEAT_LOADER_HEADINGS"].strip().lower() in _TRUE_VALUES
        values.update(overrides)
        return cls(**values)
