"""
CheatResolver — finds cheat sources for a driver and returns decoded text.

Lookup order for every source is the exact ROM name first, then (for
clones only, and only when the exact source is absent) the parent name.
"""

import logging
from pathlib import Path
from typing import Optional

from src.config import LoaderConfig
from src.driver.models import DriverContext
from src.exceptions import ArchiveError
from src.tokenizer import iter_lines, label_check, quote_read
from .archive import CheatArchive
from .encoding import decode_content
from .models import TextContent

__all__ = ["CheatResolver"]

logger = logging.getLogger(__name__)


class CheatResolver:
    """
    Maps logical cheat-source names to decoded TextContent.

    `archive_lookups` counts how many times a cheat archive was opened and
    searched, so callers can verify that cached sessions skip the archive.
    """

    def __init__(self, config: LoaderConfig) -> None:
        self._config = config
        self.archive_lookups = 0

    @property
    def cheats_dir(self) -> Path:
        return self._config.cheats_dir

    # ── Plain files ───────────────────────────────────────────────────────────

    def read_file(self, filename: str) -> Optional[TextContent]:
        """Read and decode <cheats_dir>/<filename>; None if it does not exist."""
        path = self.cheats_dir / filename
        if not path.is_file():
            return None
        try:
            data = path.read_bytes()
        except OSError as exc:
            logger.warning("Cannot read cheat file %s: %s", path, exc)
            return None
        return decode_content(data, self._config.legacy_encoding, source=path.name)

    def read_for_driver(self, context: DriverContext, suffix: str) -> Optional[TextContent]:
        """Read <rom><suffix>, falling back to <parent><suffix> for clones."""
        for name in context.candidate_names():
            content = self.read_file(f"{name}{suffix}")
            if content is not None:
                if name != context.rom_name:
                    logger.info("Using parent cheats %s for %s", content.source, context.rom_name)
                return content
            logger.debug("No %s%s in %s", name, suffix, self.cheats_dir)
        return None

    # ── Cheat archive ─────────────────────────────────────────────────────────

    def read_archive_ini(self, context: DriverContext) -> Optional[TextContent]:
        """
        Load <rom>.ini (or <parent>.ini) from the cheat archive, with its
        `include` lines replaced by the included entries' text.
        """
        path = CheatArchive.find(self.cheats_dir, self._config.archive_name)
        if path is None:
            return None

        self.archive_lookups += 1
        try:
            with CheatArchive(path) as archive:
                for name in context.candidate_names():
                    content = self._read_entry(archive, f"{name}.ini")
                    if content is None:
                        continue
                    text = self._expand_includes(archive, content.text)
                    logger.info("Loaded %s.ini from %s", name, path.name)
                    return TextContent(text=text, encoding=content.encoding,
                                       source=f"{name}.ini({path.name})")
        except ArchiveError as exc:
            logger.warning("Skipping cheat archive: %s", exc)
        return None

    def _read_entry(self, archive: CheatArchive, entry: str) -> Optional[TextContent]:
        data = archive.read(entry)
        if data is None:
            return None
        # each entry is detected on its own; included files may differ from the parent
        return decode_content(data, self._config.legacy_encoding, source=entry)

    def _expand_includes(self, archive: CheatArchive, text: str) -> str:
        """
        Replace `include "name"` lines with the text of name.ini from the
        same archive. Runs at most max_include_depth passes; includes that
        cannot be found are dropped.
        """
        for _ in range(self._config.max_include_depth):
            found_include = False
            lines: list[str] = []
            for _, line in iter_lines(text):
                t = label_check(line, "include")
                if t is None:
                    lines.append(line)
                    continue
                found_include = True
                quoted = quote_read(t)
                if quoted is None:
                    continue
                included = self._read_entry(archive, f"{quoted[0]}.ini")
                if included is None:
                    logger.warning("Included cheat file %s.ini not found in %s",
                                   quoted[0], archive.path.name)
                    continue
                lines.extend(line for _, line in iter_lines(included.text))
            text = "\n".join(lines) + "\n"
            if not found_include:
                break
        return text
