"""
IniBackend — curly-brace cheat files (<rom>.ini).

Grammar (line oriented)::

    // comment
    include "other"
    cheat "Infinite Lives" advanced {
        type 0
        default 0
        0 "Disabled"
        1 "Enabled", 0, 0x1234, 0x09, 0, 0x1235, 0x00
    }

Numbers follow C conventions (0x hex, leading-0 octal, decimal).
On Game Genie hardware each comma-separated field is a code string
instead of a cpu/address/value triple.

Structural errors (bracket mismatch, directives outside a cheat) stop the
current file; malformed option lines are skipped.
"""

import logging
from typing import Callable, Optional

from src.database.models import (
    MAX_OPTIONS,
    AddressPatch,
    CheatDatabase,
    CheatEntry,
    CheatOption,
)
from src.driver.models import DriverContext
from src.exceptions import StructuralError
from src.tokenizer import (
    is_comment,
    iter_lines,
    label_check,
    parse_c_integer,
    quote_read,
    skip_comma,
    skip_whitespace,
)
from .base import AbstractBackend, BackendKind
from .diagnostics import DiagnosticSink

__all__ = ["IniBackend", "IncludeLoader", "MAX_INCLUDE_DEPTH", "MAX_LINE_LENGTH"]

logger = logging.getLogger(__name__)

MAX_INCLUDE_DEPTH = 5
MAX_LINE_LENGTH   = 8190
_GENIE_CODE_LIMIT = 10
_GENIE_CHARS      = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-:")

# Maps an include file name ("name.dat") to (text, source name), or None if absent
IncludeLoader = Callable[[str], Optional[tuple[str, str]]]


class _FileState:
    """Parse cursor for one file."""

    def __init__(self) -> None:
        self.entry: Optional[CheatEntry] = None
        self.inside: Optional[str] = None    # None: outside; "{": braced block; "": block without brace
        self.own_added = 0
        self.skipping = False                # inside a cheat whose header was unreadable


class IniBackend(AbstractBackend):
    """
    Parses .ini cheat text from a file or from an in-memory buffer.

    With an *include_loader* (filesystem mode) `include` lines pull in
    "<name>.dat", or failing that "<name>.ini", parsed with this grammar.
    Without one (buffer mode, e.g. archive content already expanded by
    the caller) include lines are ignored.
    """

    kind = BackendKind.INI

    def __init__(
        self,
        sink: Optional[DiagnosticSink] = None,
        heading: bool = False,
        include_loader: Optional[IncludeLoader] = None,
        max_include_depth: int = MAX_INCLUDE_DEPTH,
    ) -> None:
        super().__init__(sink=sink, heading=heading)
        self._include_loader = include_loader
        self._max_include_depth = max_include_depth

    def parse(
        self,
        content: str,
        context: DriverContext,
        database: CheatDatabase,
        source: str,
        depth: int = 0,
    ) -> int:
        """
        Args:
            depth: Include nesting level of *content* (0 for the top file).
        """
        state = _FileState()
        added = 0
        try:
            for line_number, line in iter_lines(content, MAX_LINE_LENGTH):
                added += self._parse_line(line, line_number, state, context, database, source, depth)
        except StructuralError as exc:
            self._report(source, exc.line_number, state.entry, exc.problem, exc.line_text)

        logger.debug("%s: %d cheats (include depth %d)", source, added, depth)
        return added

    # ── Line dispatch ─────────────────────────────────────────────────────────

    def _parse_line(
        self,
        line: str,
        line_number: int,
        state: _FileState,
        context: DriverContext,
        database: CheatDatabase,
        source: str,
        depth: int,
    ) -> int:
        """Handle one line; returns the number of entries it appended."""
        if is_comment(line):
            return 0

        if state.skipping and label_check(line, "cheat") is None:
            if skip_whitespace(line).startswith("}"):
                if state.inside != "{":
                    raise StructuralError("missing opening bracket", line_number)
                state.inside = None
                state.skipping = False
            return 0

        t = label_check(line, "include")
        if t is not None:
            if self._include_loader is None:
                return 0
            return self._include(t, line, line_number, state, context, database, source, depth)

        t = label_check(line, "cheat")
        if t is not None:
            return self._open_cheat(t, line, line_number, state, database, source)

        t = label_check(line, "type")
        if t is not None:
            self._require_cheat(state, "rogue cheat type", line_number, line)
            parsed = parse_c_integer(t)
            state.entry.kind = parsed[0] if parsed else 0
            return 0

        t = label_check(line, "default")
        if t is not None:
            self._require_cheat(state, "rogue default", line_number, line)
            parsed = parse_c_integer(t)
            state.entry.default_option = parsed[0] if parsed else 0
            return 0

        parsed = parse_c_integer(line)
        if parsed is not None:
            self._require_cheat(state, "rogue option", line_number, line)
            index, rest = parsed
            if 0 <= index < MAX_OPTIONS:
                option = self._parse_option(index, rest, line, line_number, state.entry,
                                            context, source)
                if option is not None:
                    state.entry.set_option(index, option)
            return 0

        if skip_whitespace(line).startswith("}"):
            if state.inside != "{":
                raise StructuralError("missing opening bracket", line_number)
            state.inside = None

        return 0

    @staticmethod
    def _require_cheat(state: _FileState, problem: str, line_number: int, line: str) -> None:
        if state.inside is None or state.entry is None:
            raise StructuralError(problem, line_number, line)

    # ── Directives ────────────────────────────────────────────────────────────

    def _open_cheat(
        self,
        t: str,
        line: str,
        line_number: int,
        state: _FileState,
        database: CheatDatabase,
        source: str,
    ) -> int:
        """Open a cheat block; returns 1 if an entry was appended."""
        if state.inside == "{":
            raise StructuralError("missing closing bracket", line_number)

        quoted = quote_read(t)
        if quoted is None:
            self._report(source, line_number, state.entry, "cheat name omitted", line)
            # Drop the whole block; its options belong to no entry
            state.entry = None
            state.inside = "{" if line.rstrip().endswith("{") else ""
            state.skipping = True
            return 0
        name, rest = quoted

        advanced = label_check(rest, "advanced")
        if advanced is not None:
            rest = advanced
        rest = skip_whitespace(rest)

        state.inside = "{" if rest.startswith("{") else ""
        state.skipping = False

        entry = CheatEntry(name=name)
        state.entry = self._add_entry(database, entry, source, state.own_added == 0)
        state.own_added += 1
        return 1

    def _include(
        self,
        t: str,
        line: str,
        line_number: int,
        state: _FileState,
        context: DriverContext,
        database: CheatDatabase,
        source: str,
        depth: int,
    ) -> int:
        quoted = quote_read(t)
        if quoted is None:
            self._report(source, line_number, state.entry, "included file name omitted", line)
            return 0
        name = quoted[0]

        if depth + 1 > self._max_include_depth:
            self._report(source, line_number, state.entry, "include depth exceeded", line)
            return 0

        for suffix in (".dat", ".ini"):
            loaded = self._include_loader(f"{name}{suffix}")
            if loaded is not None:
                text, included_source = loaded
                logger.debug("Including %s from %s", included_source, source)
                return self.parse(text, context, database, included_source, depth=depth + 1)

        self._report(source, line_number, state.entry, "included file doesn't exist", line)
        return 0

    # ── Options ───────────────────────────────────────────────────────────────

    def _parse_option(
        self,
        index: int,
        s: str,
        line: str,
        line_number: int,
        entry: CheatEntry,
        context: DriverContext,
        source: str,
    ) -> Optional[CheatOption]:
        quoted = quote_read(s)
        if quoted is None:
            self._report(source, line_number, entry, "option name omitted", line)
            return None
        name, s = quoted
        option = CheatOption(name)
        genie = context.hardware.uses_game_genie

        while not option.is_full:
            more, s = skip_comma(s)
            if not more:
                if not option.patches and index:
                    # only the first option may come without an address list
                    self._report(source, line_number, entry, "CPU / address / value omitted", line)
                    return None
                break

            if genie:
                code, s = _read_genie_code(s)
                option.add_patch(AddressPatch.genie(code))
                continue

            cpu = parse_c_integer(s)
            if cpu is None:
                self._report(source, line_number, entry, "CPU number omitted", line)
                return None
            _, s = skip_comma(cpu[1])

            address = parse_c_integer(s)
            if address is None:
                self._report(source, line_number, entry, "address omitted", line)
                return None
            _, s = skip_comma(address[1])

            value = parse_c_integer(s)
            if value is None:
                self._report(source, line_number, entry, "value omitted", line)
                return None
            s = value[1]

            option.add_patch(AddressPatch(
                cpu_index=cpu[0],
                address=address[0] & 0xFFFFFFFF,
                value=value[0] & 0xFF,
            ))

        return option


def _read_genie_code(s: str) -> tuple[str, str]:
    """Read one code field up to the next comma, keeping code characters only."""
    end = s.find(",")
    field, rest = (s, "") if end == -1 else (s[:end], s[end:])
    code = "".join(c for c in field.upper() if c in _GENIE_CHARS)
    return code[:_GENIE_CODE_LIMIT], rest
