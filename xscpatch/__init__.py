"""
xscpatch: byte-level find-and-replace patching for binary files

Applies XVI32-style ``.xsc`` patch scripts (``REPLACEALL <hex> BY <hex>``) to
binary files. Every rule substitutes a fixed byte sequence with another
sequence of identical length, at every non-overlapping occurrence.
"""

from xscpatch.core.engine import PatchEngine, apply_to_buffer, apply_to_path, patch_buffer, patch_file
from xscpatch.core.parser import ScriptParser, parse_bytes, parse_path, parse_text
from xscpatch.core.schema import Diagnostic, PatchReport, ReplacementRule, RuleResult, RuleSet

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "Diagnostic",
    "PatchEngine",
    "PatchReport",
    "ReplacementRule",
    "RuleResult",
    "RuleSet",
    "ScriptParser",
    "apply_to_buffer",
    "apply_to_path",
    "parse_bytes",
    "parse_path",
    "parse_text",
    "patch_buffer",
    "patch_file",
]
