"""
CheatArchive — read-only access to a cheat archive (cheat.zip / cheat.7z).

The archive is opened for one lookup and closed on every exit path::

    with CheatArchive(path) as archive:
        data = archive.read("mslug.ini")     # case-insensitive

Any failure to open, list or extract raises ArchiveError; callers treat it
like a missing source and move on to the next candidate.
"""

import logging
import lzma
import tempfile
import zipfile
import zlib
from pathlib import Path
from typing import Optional

import py7zr
from py7zr.exceptions import ArchiveError as SevenZipError
from py7zr.exceptions import PasswordRequired

from src.exceptions import ArchiveError

__all__ = ["CheatArchive", "ARCHIVE_SUFFIXES"]

logger = logging.getLogger(__name__)

# Searched in this order
ARCHIVE_SUFFIXES = (".zip", ".7z")

# Raised by zipfile, py7zr or their codecs on a broken, encrypted or
# unsupported archive
_ARCHIVE_FAILURES = (
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    SevenZipError,
    PasswordRequired,
    NotImplementedError,
    RuntimeError,
    EOFError,
    KeyError,
    OSError,
    zlib.error,
    lzma.LZMAError,
)


class CheatArchive:
    """
    Case-insensitive entry lookup over a zip or 7z archive.
    The container type is chosen from the file suffix.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._zip: Optional[zipfile.ZipFile] = None
        self._sevenzip: Optional[py7zr.SevenZipFile] = None
        self._index: Optional[dict[str, str]] = None

    @classmethod
    def find(cls, directory: Path, stem: str) -> Optional[Path]:
        """Return the first existing <stem>.zip / <stem>.7z in *directory*."""
        for suffix in ARCHIVE_SUFFIXES:
            candidate = Path(directory) / f"{stem}{suffix}"
            if candidate.is_file():
                return candidate
        return None

    @property
    def path(self) -> Path:
        return self._path

    # ── Context management ────────────────────────────────────────────────────

    def __enter__(self) -> "CheatArchive":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def open(self) -> None:
        suffix = self._path.suffix.lower()
        try:
            if suffix == ".zip":
                self._zip = zipfile.ZipFile(self._path, "r")
            elif suffix == ".7z":
                self._sevenzip = py7zr.SevenZipFile(self._path, mode="r")
            else:
                raise ArchiveError(f"Unsupported cheat archive type: {self._path.name}")
        except _ARCHIVE_FAILURES as exc:
            raise ArchiveError(f"Cannot open cheat archive {self._path}: {exc}") from exc
        logger.debug("Opened cheat archive %s", self._path)

    def close(self) -> None:
        if self._zip is not None:
            self._zip.close()
            self._zip = None
        if self._sevenzip is not None:
            self._sevenzip.close()
            self._sevenzip = None
        self._index = None

    # ── Lookup ────────────────────────────────────────────────────────────────

    def names(self) -> list[str]:
        """List the archive's file entries."""
        try:
            if self._zip is not None:
                return [i.filename for i in self._zip.infolist() if not i.is_dir()]
            if self._sevenzip is not None:
                return [f.filename for f in self._sevenzip.list() if not f.is_directory]
        except _ARCHIVE_FAILURES as exc:
            raise ArchiveError(f"Cannot list cheat archive {self._path}: {exc}") from exc
        raise ArchiveError(f"Cheat archive {self._path} is not open")

    def read(self, name: str) -> Optional[bytes]:
        """
        Return the bytes of entry *name* (matched case-insensitively),
        or None when the archive has no such entry.
        """
        if self._index is None:
            self._index = {}
            for entry in self.names():
                self._index.setdefault(entry.lower(), entry)

        entry = self._index.get(name.lower())
        if entry is None:
            return None
        try:
            if self._zip is not None:
                return self._zip.read(entry)
            return self._read_7z(entry)
        except _ARCHIVE_FAILURES as exc:
            raise ArchiveError(f"Cannot extract {entry} from {self._path}: {exc}") from exc

    def _read_7z(self, entry: str) -> bytes:
        with tempfile.TemporaryDirectory(prefix="cheat_loader_7z_") as tmp:
            target = self._extract_target(Path(tmp), entry)
            self._sevenzip.extract(path=tmp, targets=[entry])
            self._sevenzip.reset()
            return target.read_bytes()

    def _extract_target(self, root: Path, entry: str) -> Path:
        """Where *entry* lands under *root*; names escaping *root* are refused."""
        root = root.resolve()
        target = (root / entry).resolve()
        if target == root or root not in target.parents:
            raise ArchiveError(f"Unsafe entry name {entry!r} in {self._path}")
        return target
