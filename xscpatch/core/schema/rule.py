"""Replacement rules and rule sets.

A replacement rule is the unit of a patch: a fixed byte sequence to search for
and a byte sequence of identical length to write in its place. A rule set is
the ordered, immutable collection of rules produced by parsing one script.

Order is significant. Rules are applied in sequence, so the bytes written by
one rule can become the search target of a later rule.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Tuple, Union

from xscpatch.core.schema.diagnostics import Diagnostic


def bytes_to_hex(data: bytes) -> str:
    """Render bytes as an upper-case hex string without separators."""
    return data.hex().upper()


@dataclass(frozen=True)
class ReplacementRule:
    """Single find/replace byte-sequence pair.

    The length invariant is enforced at construction, so every rule that
    exists can be written over a match in place without shifting the
    surrounding bytes.

    Attributes:
        find: Byte sequence to search for (non-empty)
        replace: Byte sequence to substitute (non-empty, same length as find)
        source_line: 1-based line number in the originating script

    Example:
        >>> rule = ReplacementRule(b"\\x41\\x42", b"\\x43\\x44", source_line=1)
        >>> rule.find_hex
        '4142'
    """

    find: bytes
    replace: bytes
    source_line: int = 0

    def __post_init__(self) -> None:
        # Normalize bytearray/memoryview input so rules stay hashable and immutable
        object.__setattr__(self, "find", bytes(self.find))
        object.__setattr__(self, "replace", bytes(self.replace))

        if not self.find or not self.replace:
            raise ValueError("Replacement rule requires non-empty find and replace sequences")
        if len(self.find) != len(self.replace):
            raise ValueError(
                f"Replacement rule length mismatch: FIND ({len(self.find)} bytes) "
                f"vs REPLACE ({len(self.replace)} bytes)"
            )

    @property
    def find_hex(self) -> str:
        return bytes_to_hex(self.find)

    @property
    def replace_hex(self) -> str:
        return bytes_to_hex(self.replace)

    def __len__(self) -> int:
        return len(self.find)

    def to_serializable(self) -> Dict[str, Any]:
        """Convert rule to a plain dict with hex-encoded byte sequences."""
        return {
            "source_line": self.source_line,
            "find": self.find_hex,
            "replace": self.replace_hex,
        }


@dataclass(frozen=True)
class RuleSet:
    """Ordered, immutable collection of replacement rules.

    Produced once per parse call and consumed by a single patch call. Behaves
    as a read-only sequence of ``ReplacementRule`` in script line order.

    Attributes:
        rules: Rules in script line order
        diagnostics: Messages collected while parsing (skipped lines, summary)
    """

    rules: Tuple[ReplacementRule, ...] = ()
    diagnostics: Tuple[Diagnostic, ...] = field(default=(), compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "rules", tuple(self.rules))
        object.__setattr__(self, "diagnostics", tuple(self.diagnostics))

    def __len__(self) -> int:
        return len(self.rules)

    def __iter__(self) -> Iterator[ReplacementRule]:
        return iter(self.rules)

    def __getitem__(self, index: Union[int, slice]) -> Union[ReplacementRule, "RuleSet"]:
        if isinstance(index, slice):
            return RuleSet(rules=self.rules[index], diagnostics=self.diagnostics)
        return self.rules[index]

    @property
    def warnings(self) -> List[Diagnostic]:
        """Diagnostics with severity "warning" or "error"."""
        return [d for d in self.diagnostics if d.severity in ("warning", "error")]

    def to_serializable(self) -> Dict[str, Any]:
        """Convert rule set to a plain dict for YAML/JSON output."""
        return {
            "rules": [rule.to_serializable() for rule in self.rules],
            "diagnostics": [d.to_serializable() for d in self.diagnostics],
        }
