"""Tests for property file discovery."""
import os

import pytest

from core.exceptions import ConfigurationError, InitializationError
from siteconfig.scanner import PropertySourceScanner, SourceKind


def _write(path, text="a=1\n"):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestPropertySourceScanner:
    """Tests for PropertySourceScanner."""

    def test_classifies_standard_and_custom_files(self, tmp_path):
        # Arrange
        _write(tmp_path / "base" / "app.properties")
        _write(tmp_path / "base" / "foo-config.properties")
        _write(tmp_path / "base" / "notes.txt")
        scanner = PropertySourceScanner()

        # Act
        sources = scanner.scan(str(tmp_path), ["base"])

        # Assert
        assert [(s.path.name, s.kind) for s in sources] == [
            ("app.properties", SourceKind.STANDARD),
            ("foo-config.properties", SourceKind.CUSTOM),
        ]

    def test_plain_properties_is_never_custom(self, tmp_path):
        path = _write(tmp_path / "foo.properties")
        scanner = PropertySourceScanner()

        assert scanner.is_custom(path) is False
        assert scanner.classify(path) is SourceKind.STANDARD

    def test_custom_files_follow_standard_files_within_a_directory(self, tmp_path):
        # Arrange: custom file sorts before standard files by name
        _write(tmp_path / "site" / "a-config.properties")
        _write(tmp_path / "site" / "b.properties")
        _write(tmp_path / "site" / "z.properties")
        scanner = PropertySourceScanner()

        # Act
        names = [s.path.name for s in scanner.scan(str(tmp_path), ["site"])]

        # Assert
        assert names == ["b.properties", "z.properties", "a-config.properties"]

    def test_location_order_is_preserved(self, tmp_path):
        _write(tmp_path / "base" / "x-config.properties")
        _write(tmp_path / "site" / "app.properties")
        scanner = PropertySourceScanner()

        sources = scanner.scan(str(tmp_path), ["base", "site"])

        assert [s.location for s in sources] == ["base", "site"]

    def test_missing_location_is_skipped(self, tmp_path):
        _write(tmp_path / "base" / "app.properties")
        scanner = PropertySourceScanner()

        sources = scanner.scan(str(tmp_path), ["missing", "base", "also/missing"])

        assert len(sources) == 1

    def test_absolute_location_ignores_root(self, tmp_path):
        _write(tmp_path / "abs" / "app.properties")
        scanner = PropertySourceScanner()

        sources = scanner.scan("/nonexistent/root", [str(tmp_path / "abs")])

        assert [s.path for s in sources] == [tmp_path / "abs" / "app.properties"]

    def test_relative_location_without_root_raises(self):
        scanner = PropertySourceScanner()

        with pytest.raises(InitializationError):
            scanner.scan(None, ["relative"])

    def test_file_location_is_a_single_candidate(self, tmp_path):
        path = _write(tmp_path / "one.properties")
        _write(tmp_path / "other.properties")
        scanner = PropertySourceScanner()

        sources = scanner.scan(str(tmp_path), ["one.properties"])

        assert [s.path for s in sources] == [path]

    def test_directory_matching_pattern_is_not_custom(self, tmp_path):
        (tmp_path / "conf" / "dir-config.properties").mkdir(parents=True)
        scanner = PropertySourceScanner()

        assert scanner.scan(str(tmp_path), ["conf"]) == []

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not supported")
    def test_dangling_symlink_is_ignored(self, tmp_path):
        (tmp_path / "conf").mkdir()
        os.symlink(tmp_path / "nowhere.properties", tmp_path / "conf" / "dangling-config.properties")
        scanner = PropertySourceScanner()

        assert scanner.scan(str(tmp_path), ["conf"]) == []

    def test_custom_pattern_can_be_changed(self, tmp_path):
        _write(tmp_path / "conf" / "site.override")
        _write(tmp_path / "conf" / "x-config.properties")
        scanner = PropertySourceScanner(r".*\.override")

        sources = scanner.scan(str(tmp_path), ["conf"])

        assert [(s.path.name, s.kind) for s in sources] == [
            ("x-config.properties", SourceKind.STANDARD),
            ("site.override", SourceKind.CUSTOM),
        ]

    def test_pattern_must_match_whole_name(self, tmp_path):
        path = _write(tmp_path / "foo-config.properties.bak")

        assert PropertySourceScanner().is_custom(path) is False

    def test_invalid_pattern_raises(self):
        with pytest.raises(ConfigurationError):
            PropertySourceScanner("([unclosed")
