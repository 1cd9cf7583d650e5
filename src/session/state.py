"""
CheatSession — picks the cheat source for a game and remembers the choice.

Search order on the first load of a game:

  NES / FDS hardware      → <rom>.vct only (state USING_NES_VCT either way)
  otherwise, first hit wins:
    1. cheat.dat           exact ROM, then parent
    2. wayder cheat.dat    exact ROM, then parent
    3. <rom>.ini           plain file, parent fallback, includes followed
    4. cheat.zip / .7z     <rom>.ini then <parent>.ini, includes expanded
    5. <rom>.dat           Nebula format, parent fallback
    6. nothing             → NONE_FOUND, never searched again

Later loads in the same session (cheat reset) skip the search and re-parse
the source that won: the extracted cheat.dat section or archive text is
kept in memory, plain files are re-read by name.
"""

import logging
from enum import Enum
from typing import Optional

from src.acquisition import CheatResolver, TextContent
from src.backends import BackendKind, DiagnosticSink, LoggingSink, extract_driver_lines, get_backend
from src.config import LoaderConfig
from src.database import CheatDatabase
from src.driver import DriverContext, HardwareFamily
from src.exceptions import AcquisitionError, SessionError

__all__ = ["LoadState", "CheatSession"]

logger = logging.getLogger(__name__)


class LoadState(str, Enum):
    UNINITIALIZED           = "uninitialized"
    USING_NES_VCT           = "nes_vct"
    USING_MAME_DAT_SELF     = "mame_dat_self"
    USING_MAME_DAT_PARENT   = "mame_dat_parent"
    USING_WAYDER_DAT_SELF   = "wayder_dat_self"
    USING_WAYDER_DAT_PARENT = "wayder_dat_parent"
    USING_ARCHIVE_INI       = "archive_ini"
    USING_PLAIN_INI         = "plain_ini"
    USING_NEBULA_DAT        = "nebula_dat"
    NONE_FOUND              = "none_found"


def mame_dat_filename(hardware: HardwareFamily) -> str:
    """cheat.dat variant searched for a hardware family."""
    if hardware.is_famicom:
        return "cheatnes.dat"
    if hardware == HardwareFamily.SNES:
        return "cheatsnes.dat"
    return "cheat.dat"


class CheatSession:
    """
    Owns the CheatDatabase of one loaded game.

    Usage::

        session = CheatSession(LoaderConfig(cheats_path="~/fbneo/cheats"))
        db = session.load(DriverContext("mslugx", parent_name="mslug", is_clone=True))
        print(session.state, len(db))
        db = session.load(context)      # cheat reset: re-parses the cached source
        session.reset()                 # game unloaded
    """

    def __init__(
        self,
        config: Optional[LoaderConfig] = None,
        resolver: Optional[CheatResolver] = None,
        sink: Optional[DiagnosticSink] = None,
    ) -> None:
        self._config = config if config is not None else LoaderConfig()
        self._resolver = resolver if resolver is not None else CheatResolver(self._config)
        self._sink = sink if sink is not None else LoggingSink()
        self._state = LoadState.UNINITIALIZED
        self._database = CheatDatabase()
        self._cached: Optional[TextContent] = None     # cheat.dat section or expanded archive text
        self._cached_driver: Optional[str] = None
        self._source_file: Optional[str] = None
        self._rom_name: Optional[str] = None

    # ── Public API ────────────────────────────────────────────────────────────

    @property
    def state(self) -> LoadState:
        return self._state

    @property
    def database(self) -> CheatDatabase:
        return self._database

    @property
    def entry_count(self) -> int:
        """Number of selectable cheats found by the last load."""
        return self._database.count()

    @property
    def source(self) -> Optional[str]:
        """Name of the source the session settled on, if any."""
        if self._cached is not None:
            return self._cached.source
        return self._source_file

    def load(self, context: DriverContext) -> CheatDatabase:
        """
        Rebuild the cheat database for *context*.

        Never raises for missing or broken cheat files: the worst case is
        an empty database.

        Raises:
            SessionError: *context* names a different game than the one this
                          session was started for; call reset() first.
        """
        if self._state != LoadState.UNINITIALIZED and context.rom_name != self._rom_name:
            raise SessionError(
                f"Session holds cheats for {self._rom_name}, not {context.rom_name}; reset() first"
            )

        self._database = CheatDatabase()
        if self._state == LoadState.UNINITIALIZED:
            self._rom_name = context.rom_name
            self._discover(context)
        else:
            self._reload(context)
        logger.info("Cheats for %s: %d entries via %s",
                    context, self._database.count(), self._state.value)
        return self._database

    def reset(self) -> None:
        """Forget the chosen source (game unloaded)."""
        self._state = LoadState.UNINITIALIZED
        self._database = CheatDatabase()
        self._cached = None
        self._cached_driver = None
        self._source_file = None
        self._rom_name = None

    # ── First load ────────────────────────────────────────────────────────────

    def _discover(self, context: DriverContext) -> None:
        if context.hardware.is_famicom:
            self._state = LoadState.USING_NES_VCT
            content = self._read(lambda: self._resolver.read_for_driver(context, ".vct"))
            if content is not None:
                self._source_file = content.source
                self._parse(BackendKind.VCT, content, context)
            return

        mame_files = (
            (mame_dat_filename(context.hardware),
             LoadState.USING_MAME_DAT_SELF, LoadState.USING_MAME_DAT_PARENT),
            (self._config.wayder_filename,
             LoadState.USING_WAYDER_DAT_SELF, LoadState.USING_WAYDER_DAT_PARENT),
        )
        for filename, self_state, parent_state in mame_files:
            if self._try_mame_file(filename, self_state, parent_state, context):
                return

        content = self._read(lambda: self._resolver.read_for_driver(context, ".ini"))
        if content is not None:
            self._state = LoadState.USING_PLAIN_INI
            self._source_file = content.source
            self._parse(BackendKind.INI, content, context)
            return

        content = self._read(lambda: self._resolver.read_archive_ini(context))
        if content is not None:
            self._state = LoadState.USING_ARCHIVE_INI
            self._cached = content
            self._parse(BackendKind.INI, content, context)
            return

        content = self._read(lambda: self._resolver.read_for_driver(context, ".dat"))
        if content is not None:
            self._state = LoadState.USING_NEBULA_DAT
            self._source_file = content.source
            self._parse(BackendKind.NEBULA_DAT, content, context)
            return

        logger.info("No cheats found for %s", context)
        self._state = LoadState.NONE_FOUND

    def _try_mame_file(
        self,
        filename: str,
        self_state: LoadState,
        parent_state: LoadState,
        context: DriverContext,
    ) -> bool:
        content = self._read(lambda: self._resolver.read_file(filename))
        if content is None:
            return False

        drivers = [(context.rom_name, self_state)]
        if context.has_parent:
            drivers.append((context.parent_name, parent_state))

        for driver, state in drivers:
            section = extract_driver_lines(content.text, driver)
            if section is None:
                logger.debug("%s has no records for %s", filename, driver)
                continue
            cached = TextContent(text=section, encoding=content.encoding, source=filename)
            if self._parse(BackendKind.MAME_DAT, cached, context, driver_name=driver) > 0:
                self._state = state
                self._cached = cached
                self._cached_driver = driver
                return True
        return False

    # ── Repeat loads ──────────────────────────────────────────────────────────

    def _reload(self, context: DriverContext) -> None:
        state = self._state
        if state in (LoadState.USING_MAME_DAT_SELF, LoadState.USING_MAME_DAT_PARENT,
                     LoadState.USING_WAYDER_DAT_SELF, LoadState.USING_WAYDER_DAT_PARENT):
            self._parse(BackendKind.MAME_DAT, self._cached, context, driver_name=self._cached_driver)
        elif state == LoadState.USING_ARCHIVE_INI:
            self._parse(BackendKind.INI, self._cached, context)
        elif state in (LoadState.USING_PLAIN_INI, LoadState.USING_NEBULA_DAT,
                       LoadState.USING_NES_VCT):
            if self._source_file is None:
                return
            content = self._read(lambda: self._resolver.read_file(self._source_file))
            if content is None:
                logger.warning("Cheat file %s disappeared since the first load", self._source_file)
                return
            kind = {
                LoadState.USING_PLAIN_INI:  BackendKind.INI,
                LoadState.USING_NEBULA_DAT: BackendKind.NEBULA_DAT,
                LoadState.USING_NES_VCT:    BackendKind.VCT,
            }[state]
            self._parse(kind, content, context)
        # NONE_FOUND: nothing to do

    # ── Helpers ───────────────────────────────────────────────────────────────

    def _read(self, lookup) -> Optional[TextContent]:
        """Run a resolver lookup, treating acquisition failures as absence."""
        try:
            return lookup()
        except AcquisitionError as exc:
            logger.warning("Cheat source unavailable: %s", exc)
            return None

    def _include_loader(self, filename: str) -> Optional[tuple[str, str]]:
        content = self._read(lambda: self._resolver.read_file(filename))
        if content is None:
            return None
        return content.text, content.source

    def _parse(self, kind: BackendKind, content: TextContent, context: DriverContext,
               **kwargs) -> int:
        options: dict = {}
        if kind == BackendKind.INI:
            options["max_include_depth"] = self._config.max_include_depth
            # archive text arrives with includes already expanded
            if self._state != LoadState.USING_ARCHIVE_INI:
                options["include_loader"] = self._include_loader
        backend = get_backend(kind, sink=self._sink, heading=self._config.heading_entries, **options)
        return backend.parse(content.text, context, self._database, content.source, **kwargs)
