"""Diagnostic records emitted while parsing scripts and patching buffers."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

# Stable diagnostic codes
INVALID_FORMAT = "INVALID_FORMAT"
EMPTY_HEX = "EMPTY_HEX"
INVALID_HEX = "INVALID_HEX"
LENGTH_MISMATCH = "LENGTH_MISMATCH"
NO_RULES = "NO_RULES"
RULES_PARSED = "RULES_PARSED"


@dataclass(frozen=True)
class Diagnostic:
    """A single informational message, warning or error.

    Diagnostics are produced by the script parser for every skipped line and
    for the final summary. They are returned alongside the parsed rules so
    callers can inspect them without scraping log output.

    Attributes:
        code: Stable identifier (e.g., "LENGTH_MISMATCH")
        message: Human-readable description
        severity: Severity level - "error", "warning", or "info"
        line: 1-based script line the diagnostic refers to (None for
              whole-script diagnostics)
    """

    code: str
    message: str
    severity: str = "warning"
    line: Optional[int] = None

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        return f"[Line {self.line}] {self.message}"

    def to_serializable(self) -> Dict[str, Any]:
        """Convert diagnostic to a plain dict for YAML/JSON output."""
        result: Dict[str, Any] = {
            "code": self.code,
            "severity": self.severity,
            "message": self.message,
        }
        if self.line is not None:
            result["line"] = self.line
        return result


def to_serializable(value: Any) -> Any:
    """Helper to serialize any schema value.

    If the value has a ``to_serializable`` method, uses that method.
    Otherwise, returns the value as-is.

    Args:
        value: The value to serialize

    Returns:
        Plain-data representation of the value
    """
    if hasattr(value, "to_serializable"):
        return value.to_serializable()
    return value
