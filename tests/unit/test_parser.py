"""Tests for the .xsc script parser."""

import logging

import pytest

from xscpatch.core.parser import ScriptParser, parse_bytes, parse_path, parse_text
from xscpatch.core.schema.diagnostics import (
    EMPTY_HEX,
    INVALID_FORMAT,
    INVALID_HEX,
    LENGTH_MISMATCH,
    NO_RULES,
)
from xscpatch.core.schema.rule import RuleSet


def codes(rule_set):
    return [d.code for d in rule_set.diagnostics]


class TestValidInstructions:
    """Tests for well-formed REPLACEALL lines."""

    def test_single_rule(self):
        """Test parsing one rule with spaced hex pairs."""
        rules = parse_text("REPLACEALL 41 42 BY 43 44\n")

        assert len(rules) == 1
        assert rules[0].find == b"\x41\x42"
        assert rules[0].replace == b"\x43\x44"
        assert rules[0].source_line == 1

    def test_hex_is_case_insensitive(self):
        """Test that lower- and upper-case hex digits decode the same."""
        rules = parse_text("REPLACEALL deadBEEF BY DEADbeef")

        assert rules[0].find == bytes.fromhex("deadbeef")
        assert rules[0].replace == bytes.fromhex("deadbeef")

    def test_spaces_inside_hex_are_ignored(self):
        """Test that arbitrary interior spaces are stripped."""
        rules = parse_text("REPLACEALL 4 1 4  2 BY 43   44")

        assert rules[0].find == b"AB"
        assert rules[0].replace == b"CD"

    def test_source_line_counts_all_lines(self):
        """Test that line numbers include skipped and blank lines."""
        script = "\n".join([
            "; comment",
            "",
            "REPLACEALL 00 BY 01",
            "GOTO 100",
            "REPLACEALL 02 BY 03",
        ])

        rules = parse_text(script)

        assert [r.source_line for r in rules] == [3, 5]

    def test_rules_keep_script_order(self):
        """Test that rule order follows line order."""
        rules = parse_text("REPLACEALL 0A BY 0B\nREPLACEALL 01 BY 02\n")

        assert [r.find for r in rules] == [b"\x0a", b"\x01"]

    def test_crlf_line_endings(self):
        """Test that Windows line endings are normalized."""
        rules = parse_text("REPLACEALL 41 BY 42\r\nREPLACEALL 43 BY 44\r\n")

        assert len(rules) == 2
        assert rules[1].source_line == 2
        assert rules[1].replace == b"D"

    def test_text_with_leading_bom(self):
        """Test that already-decoded text with a BOM is parsed."""
        rules = parse_text("\ufeffREPLACEALL 41 BY 42")

        assert len(rules) == 1

    def test_surrounding_whitespace_is_trimmed(self):
        """Test that indented instructions are still recognized."""
        rules = parse_text("   \tREPLACEALL 41 BY 42   ")

        assert len(rules) == 1


class TestIgnoredLines:
    """Tests for lines that are not instructions at all."""

    def test_prefix_is_case_sensitive(self):
        """Test that lower-case keywords are ignored."""
        rules = parse_text("replaceall 41 BY 42")

        assert len(rules) == 0
        assert codes(rules) == [NO_RULES]

    def test_bare_keyword_is_skipped(self):
        """Test that 'REPLACEALL ' with nothing after it yields no rule."""
        rules = parse_text("REPLACEALL \nREPLACEALL 41 BY 42")

        assert len(rules) == 1
        assert rules[0].source_line == 2

    def test_prefix_requires_trailing_space(self):
        """Test that REPLACEALLx lines are not instructions."""
        rules = parse_text("REPLACEALL41 BY 42")

        assert len(rules) == 0


class TestMalformedLines:
    """Tests for malformed instruction lines (skipped with a warning)."""

    def test_missing_separator(self):
        """Test that a line without ' BY ' is skipped."""
        rules = parse_text("REPLACEALL 4142\n")

        assert len(rules) == 0
        assert codes(rules) == [INVALID_FORMAT, NO_RULES]
        assert rules.diagnostics[0].line == 1

    def test_malformed_line_does_not_abort_parse(self):
        """Test that a later well-formed line is still parsed."""
        rules = parse_text("REPLACEALL 4142\nREPLACEALL 41 42 BY 43 44\n")

        assert len(rules) == 1
        assert rules[0].source_line == 2
        assert rules[0].find == b"AB"

    def test_multiple_separators_rejected(self):
        """Test that an ambiguous split is rejected."""
        rules = parse_text("REPLACEALL 41 BY 42 BY 43")

        assert len(rules) == 0
        assert INVALID_FORMAT in codes(rules)

    def test_empty_find(self):
        """Test that an empty find segment is skipped."""
        rules = parse_text("REPLACEALL  BY 41")

        assert len(rules) == 0
        assert EMPTY_HEX in codes(rules)

    def test_odd_length_hex(self):
        """Test that an odd number of hex digits is skipped."""
        rules = parse_text("REPLACEALL 414 BY 424")

        assert len(rules) == 0
        assert INVALID_HEX in codes(rules)

    def test_non_hex_character(self):
        """Test that non-hex characters are skipped."""
        rules = parse_text("REPLACEALL 4G BY 42")

        assert len(rules) == 0
        assert INVALID_HEX in codes(rules)

    def test_tab_inside_hex_is_not_whitespace(self):
        """Test that only spaces are stripped from hex segments."""
        rules = parse_text("REPLACEALL 41\t42 BY 4344")

        assert len(rules) == 0
        assert INVALID_HEX in codes(rules)

    def test_length_mismatch(self):
        """Test that rules with different decoded lengths are discarded."""
        rules = parse_text("REPLACEALL 41 BY 4243\n")

        assert len(rules) == 0
        assert codes(rules) == [LENGTH_MISMATCH, NO_RULES]

    def test_length_mismatch_excluded_from_count(self):
        """Test that only the valid lines are counted."""
        rules = parse_text("REPLACEALL 41 BY 4243\nREPLACEALL 41 BY 42\nREPLACEALL 4142 BY 43\n")

        assert len(rules) == 1
        assert rules[0].source_line == 2

    def test_warnings_are_logged(self, caplog):
        """Test that skipped lines are logged at WARNING level."""
        with caplog.at_level(logging.WARNING, logger="xscpatch.core.parser"):
            parse_text("REPLACEALL 41 BY 4243")

        assert "length mismatch" in caplog.text
        assert "No valid 'REPLACEALL' instructions" in caplog.text


class TestDiagnosticObserver:
    """Tests for the injected diagnostic callback."""

    def test_observer_receives_every_diagnostic(self):
        """Test that the observer sees the same diagnostics as the rule set."""
        seen = []
        parser = ScriptParser(on_diagnostic=seen.append)

        rules = parser.parse_text("REPLACEALL 41\nREPLACEALL 41 BY 42")

        assert seen == list(rules.diagnostics)
        assert seen[0].code == INVALID_FORMAT
        assert seen[-1].severity == "info"

    def test_empty_script_is_warning_not_error(self):
        """Test that an empty script returns an empty rule set."""
        rules = parse_text("")

        assert isinstance(rules, RuleSet)
        assert len(rules) == 0
        assert rules.warnings[0].code == NO_RULES


class TestParseBytes:
    """Tests for parsing raw script bytes."""

    def test_utf8_bytes(self):
        """Test that bytes are decoded as UTF-8 before parsing."""
        rules = parse_bytes("; café patch\nREPLACEALL 41 BY 42\n".encode("utf-8"))

        assert len(rules) == 1
        assert rules[0].source_line == 2

    def test_bytearray_accepted(self):
        """Test that bytearray input is accepted."""
        rules = parse_bytes(bytearray(b"REPLACEALL 00 BY FF"))

        assert rules[0].replace == b"\xff"

    def test_utf8_bom_is_dropped(self):
        """Test that a leading byte-order mark does not hide the first rule."""
        rules = parse_bytes("REPLACEALL 41 BY 42\r\n".encode("utf-8-sig"))

        assert len(rules) == 1
        assert rules[0].source_line == 1
        assert rules[0].find == b"A"

    def test_non_bytes_rejected(self):
        """Test that text passed as bytes raises TypeError."""
        with pytest.raises(TypeError):
            parse_bytes("REPLACEALL 41 BY 42")  # type: ignore[arg-type]


class TestParsePath:
    """Tests for parsing script files."""

    def test_parse_existing_file(self, tmp_path):
        """Test reading and parsing a script file."""
        script = tmp_path / "patch.xsc"
        script.write_bytes(b"REPLACEALL 41 42 BY 43 44\r\n")

        rules = parse_path(script)

        assert rules is not None
        assert len(rules) == 1

    def test_file_with_utf8_bom(self, tmp_path):
        """Test that scripts saved with a BOM keep their first rule."""
        script = tmp_path / "bom.xsc"
        script.write_bytes("REPLACEALL 41 BY 42\r\nREPLACEALL 43 BY 44\r\n".encode("utf-8-sig"))

        rules = parse_path(script)

        assert rules is not None
        assert [r.source_line for r in rules] == [1, 2]

    def test_missing_file_returns_none(self, tmp_path):
        """Test that a missing script yields None, not an empty rule set."""
        assert parse_path(tmp_path / "missing.xsc") is None

    def test_directory_returns_none(self, tmp_path):
        """Test that a directory is not accepted as a script."""
        assert parse_path(tmp_path) is None

    def test_file_without_rules_returns_empty_rule_set(self, tmp_path):
        """Test that zero parsed rules is distinct from a missing file."""
        script = tmp_path / "empty.xsc"
        script.write_text("; nothing here\n")

        rules = parse_path(str(script))

        assert rules is not None
        assert len(rules) == 0
