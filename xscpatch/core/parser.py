"""Parser for ``.xsc`` patch scripts.

A script is line-oriented text with one instruction per line::

    REPLACEALL 41 42 BY 43 44

Hex digits are case-insensitive and spaces between them are ignored. Lines
that do not start with ``REPLACEALL `` (blank lines, comments, other XVI32
directives) are ignored silently. Lines that do start with it but are
malformed are skipped with a warning; a bad line never aborts the parse.
"""

import binascii
import logging
import re
from pathlib import Path
from typing import Callable, List, Optional, Union

from xscpatch.core.schema.diagnostics import (
    EMPTY_HEX,
    INVALID_FORMAT,
    INVALID_HEX,
    LENGTH_MISMATCH,
    NO_RULES,
    RULES_PARSED,
    Diagnostic,
)
from xscpatch.core.schema.rule import ReplacementRule, RuleSet

logger = logging.getLogger(__name__)

INSTRUCTION_PREFIX = "REPLACEALL "
SEPARATOR = " BY "
BYTE_ORDER_MARK = "\ufeff"

_LINE_BREAK = re.compile(r"\r?\n")

DiagnosticObserver = Callable[[Diagnostic], None]


def _hex_to_bytes(hex_string: str) -> bytes:
    """Decode a hex digit string (two digits per byte, case-insensitive).

    Raises:
        ValueError: If the string has an odd length or a non-hex character
    """
    if len(hex_string) % 2 != 0:
        raise ValueError("Hex string has an odd length.")
    try:
        return binascii.unhexlify(hex_string)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Non-hexadecimal digit found in '{hex_string}'") from e


class ScriptParser:
    """Converts ``.xsc`` script content into a ``RuleSet``.

    The parser keeps no state between calls. Diagnostics for skipped lines are
    logged, recorded on the returned rule set, and passed to the optional
    observer as they occur.

    Example:
        >>> parser = ScriptParser()
        >>> rules = parser.parse_text("REPLACEALL 41 42 BY 43 44\\n")
        >>> len(rules), rules[0].replace
        (1, b'CD')
    """

    def __init__(self, on_diagnostic: Optional[DiagnosticObserver] = None):
        """Initialize parser.

        Args:
            on_diagnostic: Optional callable invoked with every Diagnostic
        """
        self.on_diagnostic = on_diagnostic

    def parse_text(self, text: str) -> RuleSet:
        """Parse script text into an ordered rule set.

        Args:
            text: Full script content

        Returns:
            RuleSet with one rule per valid instruction line (possibly empty)
        """
        rules: List[ReplacementRule] = []
        diagnostics: List[Diagnostic] = []

        def emit(diagnostic: Diagnostic) -> None:
            diagnostics.append(diagnostic)
            if diagnostic.severity == "info":
                logger.info(str(diagnostic))
            else:
                logger.warning(str(diagnostic))
            if self.on_diagnostic is not None:
                self.on_diagnostic(diagnostic)

        if text.startswith(BYTE_ORDER_MARK):
            text = text[len(BYTE_ORDER_MARK):]

        for index, line in enumerate(_LINE_BREAK.split(text)):
            line_number = index + 1
            trimmed = line.strip()

            if not trimmed.startswith(INSTRUCTION_PREFIX):
                continue

            instruction = trimmed[len(INSTRUCTION_PREFIX):]
            parts = instruction.split(SEPARATOR)

            if len(parts) != 2:
                emit(Diagnostic(
                    INVALID_FORMAT,
                    f"Skipping invalid format: Expected 'REPLACEALL ... BY ...'. Found: \"{trimmed}\"",
                    line=line_number,
                ))
                continue

            find_hex = parts[0].replace(" ", "")
            replace_hex = parts[1].replace(" ", "")

            if not find_hex or not replace_hex:
                emit(Diagnostic(
                    EMPTY_HEX,
                    f"Skipping invalid format: Empty hex string found in \"{trimmed}\"",
                    line=line_number,
                ))
                continue

            try:
                find = _hex_to_bytes(find_hex)
                replace = _hex_to_bytes(replace_hex)
            except ValueError as e:
                emit(Diagnostic(
                    INVALID_HEX,
                    f"Skipping invalid hex sequence in \"{trimmed}\". Error: {e}",
                    line=line_number,
                ))
                continue

            if len(find) != len(replace):
                emit(Diagnostic(
                    LENGTH_MISMATCH,
                    f"Skipping rule due to length mismatch: FIND ({len(find)} bytes) "
                    f"vs REPLACE ({len(replace)} bytes) in \"{trimmed}\"",
                    line=line_number,
                ))
                continue

            rules.append(ReplacementRule(find=find, replace=replace, source_line=line_number))

        if not rules:
            emit(Diagnostic(
                NO_RULES,
                "No valid 'REPLACEALL' instructions with matching lengths were parsed.",
            ))
        else:
            emit(Diagnostic(
                RULES_PARSED,
                f"Successfully parsed {len(rules)} valid replacement rule(s).",
                severity="info",
            ))

        return RuleSet(rules=tuple(rules), diagnostics=tuple(diagnostics))

    def parse_bytes(self, data: bytes) -> RuleSet:
        """Parse raw script bytes (decoded as UTF-8, BOM dropped) into a rule set.

        Args:
            data: Script content as bytes, bytearray or memoryview

        Returns:
            RuleSet (possibly empty)

        Raises:
            TypeError: If data is not a bytes-like object
        """
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"Expected bytes-like script content, got {type(data).__name__}")
        return self.parse_text(bytes(data).decode("utf-8-sig", errors="replace"))

    def parse_path(self, path: Union[str, Path]) -> Optional[RuleSet]:
        """Read and parse a script file.

        Args:
            path: Path to the ``.xsc`` script

        Returns:
            RuleSet (possibly empty), or None if the file is missing, not a
            regular file, or unreadable
        """
        script_path = Path(path)
        logger.info(f"Reading patch instructions from: {script_path}")

        if not script_path.is_file():
            logger.error(f"Script file not found or is not a file: {script_path}")
            return None

        try:
            data = script_path.read_bytes()
        except OSError as e:
            logger.error(f"Failed to read script file {script_path}: {e}")
            return None

        return self.parse_bytes(data)


_default_parser = ScriptParser()


def parse_text(text: str) -> RuleSet:
    """Parse script text with a default parser. See ``ScriptParser.parse_text``."""
    return _default_parser.parse_text(text)


def parse_bytes(data: bytes) -> RuleSet:
    """Parse script bytes with a default parser. See ``ScriptParser.parse_bytes``."""
    return _default_parser.parse_bytes(data)


def parse_path(path: Union[str, Path]) -> Optional[RuleSet]:
    """Parse a script file with a default parser. See ``ScriptParser.parse_path``."""
    return _default_parser.parse_path(path)
