"""Tests for the marker substitution engine (create_z3.scaffolder.markers).

Covers:
- Indentation capture and re-indentation at several depths
- Line deletion for "", Remove() and sentinel-prefixed values
- First-occurrence-only rewriting and CRLF preservation
- replace_marker on disk: strict vs graceful misses, I/O errors
"""

from __future__ import annotations

from pathlib import Path

import pytest

from create_z3.scaffolder.markers import (
    ALL_MARKERS,
    REMOVAL_PREFIX,
    Keep,
    MarkerNotFoundError,
    Remove,
    as_replacement,
    detect_indentation,
    indent_block,
    replace_marker,
    substitute_text,
)

pytestmark = pytest.mark.unit

MARKER = "// {{OAUTH_PROVIDERS}}"


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


class TestHelpers:
    @pytest.mark.parametrize("line, expected", [
        ("foo", ""),
        ("    foo", "    "),
        ("\t\tfoo", "\t\t"),
        ("  \t foo", "  \t "),
        ("", ""),
    ])
    def test_detect_indentation(self, line, expected):
        assert detect_indentation(line) == expected

    def test_indent_block_leaves_empty_lines_empty(self):
        assert indent_block("a\n\nb", "  ") == ["  a", "", "  b"]

    def test_indent_block_normalises_crlf(self):
        assert indent_block("a\r\nb", "\t") == ["\ta", "\tb"]

    @pytest.mark.parametrize("value", ["", REMOVAL_PREFIX, f"{REMOVAL_PREFIX}social", Remove(), Keep("")])
    def test_removal_values(self, value):
        assert isinstance(as_replacement(value), Remove)

    def test_plain_string_is_kept(self):
        assert as_replacement("x") == Keep("x")

    def test_markers_are_distinct(self):
        assert len(set(ALL_MARKERS)) == len(ALL_MARKERS)
        for marker in ALL_MARKERS:
            others = [m for m in ALL_MARKERS if m != marker]
            assert not any(marker in other for other in others)


# ---------------------------------------------------------------------------
# substitute_text
# ---------------------------------------------------------------------------


class TestSubstituteText:
    @pytest.mark.parametrize("indent", ["", "  ", "    ", "        ", "\t", "\t\t"])
    def test_multiline_fragment_takes_marker_indentation(self, indent):
        content = "start\n" + indent + MARKER + "\nend\n"
        fragment = "socialProviders: {\n  google: {},\n},"

        result = substitute_text(content, MARKER, fragment)

        assert result == (
            "start\n"
            f"{indent}socialProviders: {{\n"
            f"{indent}  google: {{}},\n"
            f"{indent}}},\n"
            "end\n"
        )

    def test_every_inserted_line_has_exact_prefix(self):
        indent = "      "
        content = "x\n" + indent + MARKER + "\ny"
        fragment = "a\nb\nc\nd"
        lines = substitute_text(content, MARKER, fragment).split("\n")
        for line in lines[1:5]:
            assert line.startswith(indent)
            assert not line.startswith(indent + " ")

    def test_empty_lines_inside_fragment_not_indented(self):
        result = substitute_text("  " + MARKER, MARKER, "a\n\nb")
        assert result == "  a\n\n  b"

    @pytest.mark.parametrize("removal", ["", Remove(), Keep(""), f"{REMOVAL_PREFIX}social_prop"])
    def test_removal_deletes_line_without_blank(self, removal):
        content = "before\n    " + MARKER + "\nafter\n"
        assert substitute_text(content, MARKER, removal) == "before\nafter\n"

    def test_marker_on_last_line_removed(self):
        assert substitute_text("a\n" + MARKER, MARKER, "") == "a"

    def test_missing_marker_returns_none(self):
        assert substitute_text("nothing here\n", MARKER, "x") is None

    def test_only_first_occurrence_rewritten(self):
        content = f"{MARKER}\nmiddle\n{MARKER}\n"
        assert substitute_text(content, MARKER, "done") == f"done\nmiddle\n{MARKER}\n"

    def test_whole_line_is_replaced_when_marker_is_substring(self):
        content = "  prefix " + MARKER + " suffix\n"
        assert substitute_text(content, MARKER, "x") == "  x\n"

    def test_crlf_separator_preserved(self):
        content = "a\r\n  " + MARKER + "\r\nb\r\n"
        assert substitute_text(content, MARKER, "x\ny") == "a\r\n  x\r\n  y\r\nb\r\n"

    def test_keep_value(self):
        assert substitute_text(MARKER, MARKER, Keep("v")) == "v"


# ---------------------------------------------------------------------------
# replace_marker (file I/O)
# ---------------------------------------------------------------------------


class TestReplaceMarker:
    async def test_rewrites_file(self, tmp_path: Path):
        target = tmp_path / "index.ts"
        target.write_text("betterAuth({\n    " + MARKER + "\n})\n", encoding="utf-8")

        replaced = await replace_marker(target, MARKER, "a: 1,\nb: 2,")

        assert replaced is True
        assert target.read_text(encoding="utf-8") == "betterAuth({\n    a: 1,\n    b: 2,\n})\n"

    async def test_missing_marker_raises(self, tmp_path: Path):
        target = tmp_path / "index.ts"
        target.write_text("no markers\n", encoding="utf-8")

        with pytest.raises(MarkerNotFoundError) as exc_info:
            await replace_marker(target, MARKER, "x")

        assert exc_info.value.marker == MARKER
        assert exc_info.value.path == target
        assert MARKER in str(exc_info.value)
        assert str(target) in str(exc_info.value)

    async def test_graceful_miss_leaves_file_untouched(self, tmp_path: Path):
        target = tmp_path / "README.md"
        target.write_text("# Readme\n", encoding="utf-8")

        replaced = await replace_marker(target, "<!-- {{OAUTH_SETUP_GUIDE}} -->", "x", graceful=True)

        assert replaced is False
        assert target.read_text(encoding="utf-8") == "# Readme\n"

    async def test_missing_file_raises_os_error(self, tmp_path: Path):
        with pytest.raises(OSError):
            await replace_marker(tmp_path / "absent.ts", MARKER, "x")

    async def test_missing_file_raises_even_when_graceful(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            await replace_marker(tmp_path / "absent.ts", MARKER, "x", graceful=True)

    async def test_marker_gone_after_substitution(self, tmp_path: Path):
        target = tmp_path / "f.txt"
        for marker in ALL_MARKERS:
            target.write_text(f"a\n  {marker}\nb\n", encoding="utf-8")
            await replace_marker(target, marker, "value")
            assert marker not in target.read_text(encoding="utf-8")
            await replace_marker(target, "value", "")
            assert target.read_text(encoding="utf-8") == "a\nb\n"
