"""
Unit tests for src/backends/vct.py

Coverage plan
─────────────
codes        → 4 tests  (single byte, little-endian multi-byte, compare mode,
                         byte count clamping)
lines        → 2 tests  (comments and blank lines, name-less code)
hardware     → 1 test   (non-Famicom drivers yield nothing)
diagnostics  → 2 tests  (no code column, address overflow)
─────────────────────────────────────────────────────────────────
Total        = 9 tests
"""

import pytest


@pytest.fixture
def sink():
    from src.backends import CollectingSink
    return CollectingSink()


def _parse(text, sink, hardware="nes"):
    from src.backends import VctBackend
    from src.database import CheatDatabase
    from src.driver import DriverContext, HardwareFamily
    db = CheatDatabase()
    added = VctBackend(sink=sink).parse(
        text, DriverContext("smb", hardware=HardwareFamily(hardware)), db, "smb.vct")
    return db, added


def _codes(entry):
    return [p.genie_code for p in entry.option(1).patches]


class TestCodes:

    def test_single_byte_code(self, sink):
        from src.database import GENIE_MARKER_ADDRESS
        from src.genie import encode
        db, added = _parse("Infinite Lives 075A-01-09\n", sink)
        assert added == 1
        entry = db[0]
        assert entry.name == "Infinite Lives"
        assert entry.option(0).name == "Disabled"
        assert _codes(entry) == [encode(0x075A, 0x09) + "0"]
        assert entry.option(1).patches[0].address == GENIE_MARKER_ADDRESS
        assert not entry.one_shot

    def test_multi_byte_data_is_little_endian(self, sink):
        from src.genie import encode
        db, _ = _parse("Money\t\t07DD-02-3412\n", sink)
        patches = db[0].option(1).patches
        assert _codes(db[0]) == [encode(0x07DD, 0x12) + "0", encode(0x07DE, 0x34) + "0"]
        assert [p.multi_byte_index for p in patches] == [0, 1]
        assert all(p.total_bytes == 2 for p in patches)

    def test_compare_mode_digit_and_one_shot(self, sink):
        db, _ = _parse("Once 0100-11-05\nGreater 0100-21-05\nLess 0100-31-05\n", sink)
        assert [_codes(e)[0][-1] for e in db] == ["1", "2", "3"]
        assert [e.one_shot for e in db] == [True, False, False]

    def test_byte_count_clamped(self, sink):
        db, _ = _parse("Zero 0100-00-05\nMany 0100-0F-0403020100\n", sink)
        assert len(_codes(db[0])) == 1
        assert len(_codes(db[1])) == 4


class TestLines:

    def test_comments_and_blank_lines_skipped(self, sink):
        text = "# header\n; note\n// other\n\n   \nLives 075A-01-09\n"
        db, added = _parse(text, sink)
        assert added == 1
        assert len(sink) == 0

    def test_code_without_name_uses_code_as_name(self, sink):
        db, _ = _parse("075A-01-09\n", sink)
        assert db[0].name == "075A-01-09"


class TestHardware:

    def test_ignored_on_non_famicom_hardware(self, sink):
        db, added = _parse("Lives 075A-01-09\n", sink, hardware="snes")
        assert added == 0
        assert len(db) == 0


class TestDiagnostics:

    def test_line_without_code_column(self, sink):
        db, added = _parse("Just a name\nLives 075A-01-09\n", sink)
        assert added == 1
        assert sink.problems == ["missing address-flags-data column"]
        assert sink.diagnostics[0].line_number == 1

    def test_address_overflow(self, sink):
        db, added = _parse("Edge FFFF-02-0101\n", sink)
        assert added == 0
        assert sink.problems == ["address out of range"]
