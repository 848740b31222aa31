"""
Schema definitions for replacement rules, rule sets and patch results.

These dataclasses are the values exchanged between the parser, the engine
and the reporting layer.
"""

from xscpatch.core.schema.diagnostics import Diagnostic, to_serializable
from xscpatch.core.schema.result import PatchReport, RuleResult
from xscpatch.core.schema.rule import ReplacementRule, RuleSet

__all__ = [
    "Diagnostic",
    "PatchReport",
    "ReplacementRule",
    "RuleResult",
    "RuleSet",
    "to_serializable",
]
