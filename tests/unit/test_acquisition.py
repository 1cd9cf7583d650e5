"""
Unit tests for src/acquisition/

Coverage plan
─────────────
encoding.py   → 8 tests  (valid UTF-8, invalid continuation, surrogate,
                          overlong, out of range, BOM, legacy fallback,
                          unknown codec)
archive.py    → 7 tests  (zip case-insensitive read, 7z read, missing entry,
                          find order, corrupt archive, unsupported
                          compression method, unsafe 7z entry name)
resolver.py   → 7 tests  (plain file, missing file, parent fallback,
                          archive ini with includes, archive parent fallback,
                          corrupt archive treated as absent, unreadable
                          entry treated as absent)
─────────────────────────────────────────────────────────────────
Total         = 22 tests
"""

import zipfile

import pytest


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

def _zip(path, entries: dict):
    with zipfile.ZipFile(path, "w") as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return path


def _set_compression_method(path, method: int):
    """Rewrite the method field of the first local and central headers."""
    data = bytearray(path.read_bytes())
    for signature, offset in ((b"PK\x03\x04", 8), (b"PK\x01\x02", 10)):
        start = data.find(signature) + offset
        data[start:start + 2] = method.to_bytes(2, "little")
    path.write_bytes(bytes(data))
    return path


def _resolver(tmp_path):
    from src.acquisition import CheatResolver
    from src.config import LoaderConfig
    return CheatResolver(LoaderConfig(cheats_path=str(tmp_path)))


def _context(rom="mslugx", parent="mslug"):
    from src.driver import DriverContext
    return DriverContext(rom, parent_name=parent, is_clone=parent is not None)


# ─────────────────────────────────────────────────────────────────────────────
# 1. Encoding detection
# ─────────────────────────────────────────────────────────────────────────────

class TestEncoding:

    def test_valid_multibyte_utf8(self):
        from src.acquisition import detect_encoding, is_valid_utf8
        data = "Vie infinie ∞ 😀".encode("utf-8")
        assert is_valid_utf8(data)
        result = detect_encoding(data)
        assert result.is_utf8
        assert result.name == "utf-8"
        assert result.confidence == 1.0

    def test_invalid_continuation_byte_is_legacy(self):
        from src.acquisition import detect_encoding, is_valid_utf8
        data = b"cheat \xc3\x28 name"
        assert not is_valid_utf8(data)
        assert not detect_encoding(data).is_utf8

    def test_surrogate_code_point_rejected(self):
        from src.acquisition import is_valid_utf8
        assert not is_valid_utf8(b"\xed\xa0\x80")

    def test_overlong_encoding_rejected(self):
        from src.acquisition import is_valid_utf8
        assert not is_valid_utf8(b"\xc0\xaf")

    def test_code_point_above_max_rejected(self):
        from src.acquisition import is_valid_utf8
        assert not is_valid_utf8(b"\xf4\x90\x80\x80")

    def test_bom_is_stripped(self):
        from src.acquisition import decode_content
        content = decode_content(b"\xef\xbb\xbfcheat \"A\"\n", source="a.ini")
        assert content.text == 'cheat "A"\n'
        assert content.encoding.name == "utf-8-sig"
        assert content.source == "a.ini"

    def test_low_confidence_guess_uses_configured_codec(self, monkeypatch):
        import chardet
        from src.acquisition import decode_content
        monkeypatch.setattr(chardet, "detect", lambda data: {"encoding": "ISO-8859-7", "confidence": 0.1})
        content = decode_content(b"Caf\xe9", legacy_encoding="cp1252")
        assert content.encoding.name == "cp1252"
        assert not content.encoding.is_utf8
        assert content.text == "Café"

    def test_unknown_legacy_codec_raises(self):
        from src.acquisition import detect_encoding
        from src.exceptions import EncodingDetectionError
        with pytest.raises(EncodingDetectionError):
            detect_encoding(b"abc", legacy_encoding="no-such-codec")


# ─────────────────────────────────────────────────────────────────────────────
# 2. CheatArchive
# ─────────────────────────────────────────────────────────────────────────────

class TestCheatArchive:

    def test_zip_lookup_is_case_insensitive(self, tmp_path):
        from src.acquisition import CheatArchive
        path = _zip(tmp_path / "cheat.zip", {"MSlug.INI": b"cheat \"A\"\n"})
        with CheatArchive(path) as archive:
            assert archive.names() == ["MSlug.INI"]
            assert archive.read("mslug.ini") == b"cheat \"A\"\n"

    def test_7z_entry_read(self, tmp_path):
        import py7zr
        from src.acquisition import CheatArchive
        source = tmp_path / "src.ini"
        source.write_bytes(b"cheat \"Seven\"\n")
        path = tmp_path / "cheat.7z"
        with py7zr.SevenZipFile(path, "w") as sz:
            sz.write(source, arcname="kof98.ini")
        with CheatArchive(path) as archive:
            assert archive.read("KOF98.ini") == b"cheat \"Seven\"\n"

    def test_missing_entry_returns_none(self, tmp_path):
        from src.acquisition import CheatArchive
        path = _zip(tmp_path / "cheat.zip", {"a.ini": b""})
        with CheatArchive(path) as archive:
            assert archive.read("b.ini") is None

    def test_find_prefers_zip(self, tmp_path):
        from src.acquisition import CheatArchive
        (tmp_path / "cheat.7z").write_bytes(b"")
        assert CheatArchive.find(tmp_path, "cheat") == tmp_path / "cheat.7z"
        _zip(tmp_path / "cheat.zip", {})
        assert CheatArchive.find(tmp_path, "cheat") == tmp_path / "cheat.zip"
        assert CheatArchive.find(tmp_path, "other") is None

    def test_corrupt_archive_raises_archive_error(self, tmp_path):
        from src.acquisition import CheatArchive
        from src.exceptions import ArchiveError
        path = tmp_path / "cheat.zip"
        path.write_bytes(b"definitely not a zip")
        with pytest.raises(ArchiveError):
            with CheatArchive(path):
                pass

    def test_unsupported_compression_method_raises_archive_error(self, tmp_path):
        from src.acquisition import CheatArchive
        from src.exceptions import ArchiveError
        path = _set_compression_method(
            _zip(tmp_path / "cheat.zip", {"game.ini": b'cheat "A" {\n}\n'}), 99)
        with CheatArchive(path) as archive:
            assert archive.names() == ["game.ini"]
            with pytest.raises(ArchiveError):
                archive.read("game.ini")

    def test_7z_entry_escaping_extract_dir_refused(self, tmp_path, monkeypatch):
        import py7zr
        from src.acquisition import CheatArchive
        from src.exceptions import ArchiveError
        source = tmp_path / "src.ini"
        source.write_bytes(b"cheat \"Seven\"\n")
        path = tmp_path / "cheat.7z"
        with py7zr.SevenZipFile(path, "w") as sz:
            sz.write(source, arcname="kof98.ini")
        with CheatArchive(path) as archive:
            monkeypatch.setattr(archive, "names", lambda: ["../evil.ini"])
            with pytest.raises(ArchiveError, match="Unsafe entry name"):
                archive.read("../evil.ini")


# ─────────────────────────────────────────────────────────────────────────────
# 3. CheatResolver
# ─────────────────────────────────────────────────────────────────────────────

class TestCheatResolver:

    def test_read_file_decodes_text(self, tmp_path):
        (tmp_path / "cheat.dat").write_bytes(":mslug:00000000:1000:01:FFFFFFFF:Lives\n".encode())
        content = _resolver(tmp_path).read_file("cheat.dat")
        assert content.text.startswith(":mslug:")
        assert content.source == "cheat.dat"

    def test_missing_file_returns_none(self, tmp_path):
        assert _resolver(tmp_path).read_file("cheat.dat") is None

    def test_parent_fallback_only_when_exact_absent(self, tmp_path):
        resolver = _resolver(tmp_path)
        (tmp_path / "mslug.ini").write_text("parent\n")
        assert resolver.read_for_driver(_context(), ".ini").source == "mslug.ini"
        (tmp_path / "mslugx.ini").write_text("self\n")
        assert resolver.read_for_driver(_context(), ".ini").source == "mslugx.ini"
        assert resolver.read_for_driver(_context(parent=None), ".dat") is None

    def test_archive_ini_expands_includes(self, tmp_path):
        _zip(tmp_path / "cheat.zip", {
            "mslugx.ini": b'include "common"\ncheat "Own" {\n}\n',
            "Common.ini": b'cheat "Shared" {\n}\n',
        })
        resolver = _resolver(tmp_path)
        content = resolver.read_archive_ini(_context())
        assert content.source == "mslugx.ini(cheat.zip)"
        assert content.text.splitlines() == ['cheat "Shared" {', "}", 'cheat "Own" {', "}"]
        assert resolver.archive_lookups == 1

    def test_archive_ini_parent_fallback(self, tmp_path):
        _zip(tmp_path / "cheat.zip", {"mslug.ini": b'cheat "Parent" {\n}\n'})
        content = _resolver(tmp_path).read_archive_ini(_context())
        assert content.source == "mslug.ini(cheat.zip)"

    def test_corrupt_archive_treated_as_absent(self, tmp_path):
        (tmp_path / "cheat.zip").write_bytes(b"garbage")
        assert _resolver(tmp_path).read_archive_ini(_context()) is None

    def test_unreadable_archive_entry_treated_as_absent(self, tmp_path):
        _set_compression_method(_zip(tmp_path / "cheat.zip", {"mslugx.ini": b'cheat "A" {\n}\n'}), 99)
        assert _resolver(tmp_path).read_archive_ini(_context()) is None
