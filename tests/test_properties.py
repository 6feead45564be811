"""Tests for the properties text format."""
import pytest

from core.exceptions import PropertiesParseError
from siteconfig.properties import format_properties, load_properties, parse_properties


class TestParseProperties:
    def test_separators(self):
        text = "a=1\nb:2\nc 3\nd = 4\ne\t:\t5\n"

        result = parse_properties(text)

        assert result == {"a": "1", "b": "2", "c": "3", "d": "4", "e": "5"}

    def test_comments_and_blank_lines_are_ignored(self):
        text = "# comment\n! also a comment\n\n   \nkey=value\n"

        assert parse_properties(text) == {"key": "value"}

    def test_value_keeps_trailing_whitespace_and_inner_separators(self):
        result = parse_properties("url = http://host:8080/path?a=b  \n")

        assert result["url"] == "http://host:8080/path?a=b  "

    def test_key_without_value(self):
        assert parse_properties("flag\n") == {"flag": ""}

    def test_line_continuation_drops_leading_whitespace(self):
        text = "list=one,\\\n    two,\\\n    three\n"

        assert parse_properties(text)["list"] == "one,two,three"

    def test_even_backslashes_do_not_continue(self):
        text = "path=C:\\\\\nnext=1\n"

        result = parse_properties(text)

        assert result == {"path": "C:\\", "next": "1"}

    def test_comment_inside_continuation_is_part_of_value(self):
        text = "a=x\\\n#y\n"

        assert parse_properties(text) == {"a": "x#y"}

    def test_escapes(self):
        text = "tab=a\\tb\nnl=a\\nb\nuni=caf\\u00e9\nkey\\ with\\ spaces=v\nother=\\q\n"

        result = parse_properties(text)

        assert result["tab"] == "a\tb"
        assert result["nl"] == "a\nb"
        assert result["uni"] == "café"
        assert result["key with spaces"] == "v"
        assert result["other"] == "q"

    def test_escaped_separator_in_key(self):
        assert parse_properties("a\\=b=c\n") == {"a=b": "c"}

    def test_crlf_and_cr_line_endings(self):
        assert parse_properties("a=1\r\nb=2\rc=3") == {"a": "1", "b": "2", "c": "3"}

    def test_later_duplicate_wins(self):
        assert parse_properties("a=1\na=2\n") == {"a": "2"}

    def test_malformed_unicode_escape_raises(self):
        with pytest.raises(PropertiesParseError) as exc_info:
            parse_properties("ok=1\nbad=\\u12G4\n", source="site.properties")

        assert exc_info.value.line == 2
        assert "site.properties:2" in str(exc_info.value)


class TestLoadProperties:
    def test_load_file(self, tmp_path):
        path = tmp_path / "app.properties"
        path.write_text("timeout=30\n", encoding="utf-8")

        assert load_properties(path) == {"timeout": "30"}

    def test_undecodable_file_is_a_parse_error(self, tmp_path):
        path = tmp_path / "bad.properties"
        path.write_bytes(b"key=\xff\xfe\n")

        with pytest.raises(PropertiesParseError):
            load_properties(path)

    def test_missing_file_raises_os_error(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_properties(tmp_path / "gone.properties")


class TestFormatProperties:
    def test_sorted_output_parses_back(self):
        properties = {"b": "two words", "a": "x=y", "key with space": " lead", "multi": "l1\nl2"}

        text = format_properties(properties)

        assert text.splitlines()[0].startswith("a=")
        assert parse_properties(text) == properties

    def test_empty_mapping(self):
        assert format_properties({}) == ""
