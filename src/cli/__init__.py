"""
cli — command-line interface for cheat-loader.

Entry points
────────────
  python -m src.cli.main
  cheat-loader               (via pyproject.toml [project.scripts])

Subcommands: load | genie encode | genie decode
"""

from src.cli.main import build_parser, cmd_genie_decode, cmd_genie_encode, cmd_load, main

__all__ = ["build_parser", "cmd_load", "cmd_genie_encode", "cmd_genie_decode", "main"]
