"""
CLI entry point for cheat-loader.

Usage
─────
  # Load the cheats a game would see and print them
  cheat-loader load --rom mslugx --parent mslug --cheats ~/fbneo/cheats

  # NES game: only <rom>.vct is consulted
  cheat-loader load --rom smb --hardware nes

  # Game Genie codes
  cheat-loader genie encode --address 0x9123 --value 0xAD
  cheat-loader genie decode SXIOPO

Subcommands are implemented as standalone functions (cmd_load,
cmd_genie_encode, cmd_genie_decode) so they can be unit-tested without
invoking argparse.
"""

import argparse
import logging
import sys
from typing import Optional

from src.config import LoaderConfig
from src.database import CheatDatabase
from src.driver import DriverContext, HardwareFamily
from src.exceptions import GenieCodeError
from src.genie import GenieCode
from src.session import CheatSession

__all__ = ["build_parser", "cmd_load", "cmd_genie_encode", "cmd_genie_decode", "main"]

logger = logging.getLogger(__name__)


# ── Argument parser ────────────────────────────────────────────────────────────


def _int_auto(text: str) -> int:
    """argparse type accepting decimal or 0x-prefixed hex."""
    try:
        return int(text, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}")


def build_parser() -> argparse.ArgumentParser:
    """
    Build and return the top-level argument parser.

    Subcommands: load | genie {encode, decode}
    """
    parser = argparse.ArgumentParser(
        prog="cheat-loader",
        description="Load emulator cheat definitions from cheat.dat, .ini, .dat and .vct files",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Enable verbose debug logging",
    )

    sub = parser.add_subparsers(dest="subcommand")

    # ── load ──────────────────────────────────────────────────────────────
    load = sub.add_parser("load", help="Load and print the cheats for a ROM set")
    load.add_argument(
        "--rom",
        required=True,
        metavar="NAME",
        help="Short ROM set name (e.g. mslugx)",
    )
    load.add_argument(
        "--parent",
        default=None,
        metavar="NAME",
        help="Parent ROM set; enables clone fallback",
    )
    load.add_argument(
        "--hardware",
        choices=[h.value for h in HardwareFamily],
        default=HardwareFamily.OTHER.value,
        help="Hardware family of the driver (default: other)",
    )
    load.add_argument(
        "--cheats",
        default=None,
        metavar="DIR",
        help="Cheat directory (default: $CHEAT_LOADER_PATH or ./cheats)",
    )
    load.add_argument(
        "--headings",
        action="store_true",
        default=False,
        help="Insert a heading entry naming each source file",
    )

    # ── genie ─────────────────────────────────────────────────────────────
    genie = sub.add_parser("genie", help="Encode or decode Game Genie codes")
    genie_sub = genie.add_subparsers(dest="genie_command")

    enc = genie_sub.add_parser("encode", help="Encode address/value[/compare]")
    enc.add_argument("--address", required=True, type=_int_auto, metavar="ADDR")
    enc.add_argument("--value", required=True, type=_int_auto, metavar="VALUE")
    enc.add_argument("--compare", default=None, type=_int_auto, metavar="VALUE")

    dec = genie_sub.add_parser("decode", help="Decode a 6- or 8-letter code")
    dec.add_argument("code", metavar="CODE")

    return parser


# ── Helpers ───────────────────────────────────────────────────────────────────


def _print_database(database: CheatDatabase) -> None:
    for entry in database:
        if entry.is_heading:
            print(f"== {entry.name} ==")
            continue
        print(f"{entry.name}  (default {entry.default_option})")
        for index, option in entry.ordered_options():
            patches = ", ".join(str(p) for p in option.patches)
            print(f"  [{index:>3}] {option.name}" + (f": {patches}" if patches else ""))


# ── Command implementations ───────────────────────────────────────────────────


def cmd_load(
    rom: str,
    parent: Optional[str] = None,
    hardware: str = HardwareFamily.OTHER.value,
    cheats: Optional[str] = None,
    headings: bool = False,
) -> CheatSession:
    """
    Run one session load for a ROM set and print what was found.

    Returns:
        The CheatSession, so callers can inspect state and database.
    """
    overrides: dict = {"heading_entries": headings} if headings else {}
    if cheats is not None:
        overrides["cheats_path"] = cheats
    config = LoaderConfig.from_env(**overrides)

    context = DriverContext(
        rom_name=rom,
        parent_name=parent,
        hardware=HardwareFamily(hardware),
        is_clone=parent is not None,
    )
    session = CheatSession(config)
    database = session.load(context)

    _print_database(database)
    print(f"{session.entry_count} cheats for {context} via {session.state.value}"
          + (f" ({session.source})" if session.source else ""))
    return session


def cmd_genie_encode(address: int, value: int, compare: Optional[int] = None) -> str:
    """Print and return the Game Genie code for an address/value pair."""
    code = GenieCode(address, value, compare).encode()
    print(code)
    return code


def cmd_genie_decode(code: str) -> GenieCode:
    """Print and return the decoded form of a Game Genie code."""
    decoded = GenieCode.from_code(code)
    print(decoded)
    return decoded


# ── Entry point ───────────────────────────────────────────────────────────────


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point. Returns exit code."""
    parser = build_parser()
    ns = parser.parse_args(argv)

    level = logging.DEBUG if ns.debug else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")

    if ns.subcommand == "load":
        cmd_load(
            rom=ns.rom,
            parent=ns.parent,
            hardware=ns.hardware,
            cheats=ns.cheats,
            headings=ns.headings,
        )
        return 0

    if ns.subcommand == "genie":
        try:
            if ns.genie_command == "encode":
                cmd_genie_encode(ns.address, ns.value, ns.compare)
                return 0
            if ns.genie_command == "decode":
                cmd_genie_decode(ns.code)
                return 0
        except GenieCodeError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
