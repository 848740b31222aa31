"""Patch results returned by the engine.

A ``PatchReport`` records what one patch call did: how many occurrences each
rule replaced and where, whether the buffer was modified at all, and, for
file-level calls, whether the result was written back.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from xscpatch.core.schema.rule import ReplacementRule


@dataclass
class RuleResult:
    """Outcome of applying one rule to a buffer.

    Attributes:
        index: 1-based position of the rule in its rule set
        rule: The applied rule
        offsets: Start offsets of every replaced occurrence, in scan order
    """

    index: int
    rule: ReplacementRule
    offsets: List[int] = field(default_factory=list)

    @property
    def matches(self) -> int:
        return len(self.offsets)

    def to_serializable(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"rule": self.index}
        result.update(self.rule.to_serializable())
        result["matches"] = self.matches
        result["offsets"] = [f"0x{offset:X}" for offset in self.offsets]
        return result


@dataclass
class PatchReport:
    """Outcome of one patch call.

    Both a modified and an unmodified buffer are success outcomes; they differ
    only in what gets reported and whether a file write is needed.

    Attributes:
        buffer: The patched buffer (same object that was passed in)
        original_length: Buffer length before any rule was applied
        rule_results: One entry per applied rule, in rule order
        target: Path of the patched file, for file-level calls
        written: True if the patched bytes were persisted to ``target``
    """

    buffer: bytearray
    original_length: int
    rule_results: List[RuleResult] = field(default_factory=list)
    target: Optional[str] = None
    written: bool = False

    @property
    def total_matches(self) -> int:
        return sum(result.matches for result in self.rule_results)

    @property
    def modified(self) -> bool:
        return self.total_matches > 0

    def to_serializable(self) -> Dict[str, Any]:
        """Convert report to a plain dict (the buffer itself is omitted)."""
        return {
            "target": self.target,
            "size": self.original_length,
            "modified": self.modified,
            "written": self.written,
            "total_matches": self.total_matches,
            "rules": [result.to_serializable() for result in self.rule_results],
        }
