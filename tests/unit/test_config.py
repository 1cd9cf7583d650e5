"""
Unit tests for src/config.py and src/backends/diagnostics.py

Coverage plan
─────────────
LoaderConfig   → 4 tests  (defaults, env vars, overrides win, cheats_dir)
diagnostics    → 3 tests  (str format, collecting sink, logging sink)
factory        → 2 tests  (each kind, unknown kind)
─────────────────────────────────────────────────────────────────
Total          = 9 tests
"""

import logging
from pathlib import Path

import pytest


class TestLoaderConfig:

    def test_defaults(self):
        from src.config import LoaderConfig
        cfg = LoaderConfig()
        assert cfg.archive_name == "cheat"
        assert cfg.wayder_filename == "wayder_cheat.dat"
        assert cfg.heading_entries is False
        assert cfg.max_include_depth == 5

    def test_from_env(self, monkeypatch):
        from src.config import LoaderConfig
        monkeypatch.setenv("CHEAT_LOADER_PATH", "/srv/cheats")
        monkeypatch.setenv("CHEAT_LOADER_LEGACY_ENCODING", "cp932")
        monkeypatch.setenv("CHEAT_LOADER_HEADINGS", "yes")
        cfg = LoaderConfig.from_env()
        assert cfg.cheats_path == "/srv/cheats"
        assert cfg.legacy_encoding == "cp932"
        assert cfg.heading_entries is True

    def test_overrides_take_precedence(self, monkeypatch):
        from src.config import LoaderConfig
        monkeypatch.setenv("CHEAT_LOADER_PATH", "/srv/cheats")
        assert LoaderConfig.from_env(cheats_path="/other").cheats_path == "/other"

    def test_cheats_dir_expands_home(self):
        from src.config import LoaderConfig
        assert LoaderConfig(cheats_path="~/cheats").cheats_dir == Path.home() / "cheats"


class TestDiagnostics:

    def test_str_includes_location_and_line(self):
        from src.backends import Diagnostic
        d = Diagnostic("a.ini", 12, "Lives", "value omitted", ' 1 "On", 0')
        assert str(d) == 'a.ini:12 in cheat "Lives": value omitted |  1 "On", 0'

    def test_collecting_sink(self):
        from src.backends import CollectingSink, Diagnostic
        sink = CollectingSink()
        sink.report(Diagnostic("a.ini", 1, None, "rogue option"))
        assert len(sink) == 1
        assert sink.problems == ["rogue option"]

    def test_logging_sink_warns(self, caplog):
        from src.backends import Diagnostic, LoggingSink
        with caplog.at_level(logging.WARNING):
            LoggingSink().report(Diagnostic("a.ini", 3, None, "missing opening bracket"))
        assert "missing opening bracket" in caplog.text


class TestBackendFactory:

    def test_each_kind(self):
        from src.backends import (
            BackendKind,
            IniBackend,
            MameDatBackend,
            NebulaDatBackend,
            VctBackend,
            get_backend,
        )
        assert isinstance(get_backend(BackendKind.MAME_DAT), MameDatBackend)
        assert isinstance(get_backend("nebula_dat"), NebulaDatBackend)
        assert isinstance(get_backend(BackendKind.INI, max_include_depth=2), IniBackend)
        assert isinstance(get_backend(BackendKind.VCT), VctBackend)

    def test_unknown_kind(self):
        from src.backends import get_backend
        with pytest.raises(ValueError):
            get_backend("xml")
