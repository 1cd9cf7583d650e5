"""
Unit tests for src/tokenizer/

Coverage plan
─────────────
label_check / quote_read / skip_comma   → 9 tests
parse_c_integer / parse_hex             → 6 tests
is_comment / iter_lines                 → 4 tests
─────────────────────────────────────────────────────────────────
Total                                   = 19 tests
"""

import pytest


class TestLabelCheck:

    def test_returns_rest_after_label(self):
        from src.tokenizer import label_check
        assert label_check('  cheat "Lives" {', "cheat") == ' "Lives" {'

    def test_returns_none_when_label_absent(self):
        from src.tokenizer import label_check
        assert label_check("default 1", "cheat") is None


class TestQuoteRead:

    def test_reads_quoted_text(self):
        from src.tokenizer import quote_read
        assert quote_read(' "Infinite Lives", 0') == ("Infinite Lives", ", 0")

    def test_reads_bare_word_up_to_comma(self):
        from src.tokenizer import quote_read
        assert quote_read("common, rest") == ("common", ", rest")

    def test_unterminated_quote_returns_none(self):
        from src.tokenizer import quote_read
        assert quote_read('"never closed') is None

    def test_empty_input_returns_none(self):
        from src.tokenizer import quote_read
        assert quote_read("   ") is None

    def test_long_text_is_truncated(self):
        from src.database.models import MAX_NAME_LENGTH
        from src.tokenizer import quote_read
        text, _ = quote_read('"' + "x" * 300 + '"')
        assert len(text) == MAX_NAME_LENGTH


class TestSkipComma:

    def test_more_text_after_comma(self):
        from src.tokenizer import skip_comma
        assert skip_comma(", 0x10, 2") == (True, " 0x10, 2")

    def test_blank_remainder_means_no_more(self):
        from src.tokenizer import skip_comma
        assert skip_comma(",   ")[0] is False
        assert skip_comma("")[0] is False


class TestNumbers:

    @pytest.mark.parametrize("text,expected", [
        ("0x1F rest", 0x1F),
        ("017,", 0o17),
        ("  42", 42),
        ("0", 0),
        ("-5", -5),
    ])
    def test_parse_c_integer_bases(self, text, expected):
        from src.tokenizer import parse_c_integer
        assert parse_c_integer(text)[0] == expected

    def test_parse_c_integer_returns_rest(self):
        from src.tokenizer import parse_c_integer
        assert parse_c_integer(" 0x10, 2") == (0x10, ", 2")

    def test_parse_c_integer_rejects_non_numbers(self):
        from src.tokenizer import parse_c_integer
        assert parse_c_integer('"Disabled"') is None

    def test_parse_hex_plain_and_prefixed(self):
        from src.tokenizer import parse_hex
        assert parse_hex("00FF0010") == 0xFF0010
        assert parse_hex("0x1a") == 0x1A

    def test_parse_hex_stops_at_first_non_digit(self):
        from src.tokenizer import parse_hex
        assert parse_hex("DD6F-6FAE") == 0xDD6F

    def test_parse_hex_raises_without_digits(self):
        from src.tokenizer import parse_hex
        with pytest.raises(ValueError):
            parse_hex("SXIOPO")


class TestLines:

    def test_is_comment_default_marker(self):
        from src.tokenizer import is_comment
        assert is_comment("// note")
        assert not is_comment("  // indented")

    def test_is_comment_custom_markers(self):
        from src.tokenizer import is_comment
        assert is_comment("# note", ("#", ";"))

    def test_iter_lines_strips_crlf_and_numbers_lines(self):
        from src.tokenizer import iter_lines
        assert list(iter_lines("a\r\nb\n\nc\n")) == [(1, "a"), (2, "b"), (3, ""), (4, "c")]

    def test_iter_lines_clips_long_lines(self):
        from src.tokenizer import iter_lines
        assert list(iter_lines("abcdef", max_length=3)) == [(1, "abc")]
