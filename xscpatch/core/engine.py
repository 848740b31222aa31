"""Patch engine applying replacement rules to byte buffers and files.

Rules are applied sequentially, in rule-set order. For each rule the buffer is
scanned left to right; every match is overwritten in place and the scan
resumes right after the written bytes, so a rule never rescans its own output.
Later rules see the buffer as already modified by earlier ones.

File-level application follows a read, patch, check, write ordering: nothing
is written unless every rule was applied and the buffer length is unchanged.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, Union

from xscpatch.core.errors import BufferLengthError, PatchWriteError, TargetFileError, XscPatchError
from xscpatch.core.schema.result import PatchReport, RuleResult
from xscpatch.core.schema.rule import ReplacementRule

logger = logging.getLogger(__name__)

Rules = Iterable[ReplacementRule]


def _apply_rule(buffer: bytearray, rule: ReplacementRule, index: int) -> RuleResult:
    """Replace every non-overlapping occurrence of one rule in place."""
    result = RuleResult(index=index, rule=rule)
    width = len(rule.replace)
    cursor = 0

    while True:
        found = buffer.find(rule.find, cursor)
        if found == -1:
            break
        buffer[found:found + width] = rule.replace
        result.offsets.append(found)
        cursor = found + width

    return result


class PatchEngine:
    """Applies rule sets to in-memory buffers and files.

    The engine keeps no state between calls; a single buffer must not be
    patched by two calls at the same time.

    Example:
        >>> engine = PatchEngine()
        >>> buffer = bytearray(b"AAAA")
        >>> engine.apply_to_buffer(buffer, [ReplacementRule(b"AA", b"BB", 1)])
        bytearray(b'BBBB')
    """

    def patch_buffer(self, buffer: bytearray, rules: Rules) -> PatchReport:
        """Apply rules to a buffer in place and report what changed.

        Args:
            buffer: Mutable buffer to patch (modified in place)
            rules: RuleSet or any iterable of ReplacementRule, applied in order

        Returns:
            PatchReport with per-rule match offsets

        Raises:
            TypeError: If buffer is not a bytearray
            BufferLengthError: If the buffer length changed during patching
        """
        if not isinstance(buffer, bytearray):
            raise TypeError(f"Expected a mutable bytearray buffer, got {type(buffer).__name__}")

        rule_list = list(rules)
        report = PatchReport(buffer=buffer, original_length=len(buffer))

        if not rule_list:
            logger.info("No valid patch instructions to apply to buffer.")
            return report

        for index, rule in enumerate(rule_list, start=1):
            logger.info(
                f"[Rule {index}/{len(rule_list)} - From script line {rule.source_line}] "
                f"FIND: {rule.find_hex} REPLACE: {rule.replace_hex}"
            )
            result = _apply_rule(buffer, rule, index)
            report.rule_results.append(result)

            if result.matches:
                logger.info(f"  => Replaced {result.matches} occurrence(s) for this rule.")
            else:
                logger.info("  => No occurrences found for this rule.")

        if len(buffer) != report.original_length:
            logger.error(
                f"Buffer length changed unexpectedly during patching "
                f"({report.original_length} -> {len(buffer)} bytes). Potential corruption detected."
            )
            raise BufferLengthError(
                "Buffer length changed unexpectedly during patching",
                expected=report.original_length,
                actual=len(buffer),
            )

        if report.modified:
            logger.info(
                f"Successfully applied a total of {report.total_matches} replacements "
                f"across all rules to the buffer."
            )
        else:
            logger.info("No matching byte sequences found for any rule in the buffer. Buffer remains unchanged.")

        return report

    def apply_to_buffer(self, buffer: bytearray, rules: Rules) -> bytearray:
        """Apply rules to a buffer in place.

        Args:
            buffer: Mutable buffer to patch
            rules: RuleSet or any iterable of ReplacementRule

        Returns:
            The same buffer object, patched

        Raises:
            BufferLengthError: If the buffer length changed during patching
        """
        return self.patch_buffer(buffer, rules).buffer

    def patch_file(self, path: Union[str, Path], rules: Rules, dry_run: bool = False) -> PatchReport:
        """Read a file, patch its contents and write them back.

        The file is written only when at least one replacement happened and
        the buffer passed the length check. The write goes to a temporary
        sibling file that then replaces the target, so a failed write leaves
        the original contents in place.

        Args:
            path: Target file
            rules: RuleSet or any iterable of ReplacementRule
            dry_run: If True, patch in memory only and never write

        Returns:
            PatchReport for the file (``written`` tells whether it was saved)

        Raises:
            TargetFileError: If the target is missing, not a file, or unreadable
            BufferLengthError: If the buffer length changed during patching
            PatchWriteError: If the patched bytes could not be written
        """
        target = Path(path)
        logger.info(f"Applying patch to file: {target}")

        if not target.is_file():
            raise TargetFileError(f"Target file not found or is not a file: {target}", path=str(target))

        try:
            buffer = bytearray(target.read_bytes())
        except OSError as e:
            raise TargetFileError(f"Failed to read target file {target}: {e}", path=str(target)) from e

        report = self.patch_buffer(buffer, rules)
        report.target = str(target)

        if dry_run:
            logger.info(f"Dry run: not writing {target}")
            return report

        if not report.modified:
            logger.info(f"No changes needed, leaving {target} untouched")
            return report

        _write_atomic(target, buffer)
        report.written = True
        logger.info(f"File saved: {target}")
        return report

    def apply_to_path(self, path: Union[str, Path], rules: Rules) -> bool:
        """Patch a file, reporting the outcome as a boolean.

        Args:
            path: Target file
            rules: RuleSet or any iterable of ReplacementRule

        Returns:
            True if the file was patched or needed no changes, False on a
            missing target, length-invariant violation, or write failure
        """
        try:
            self.patch_file(path, rules)
        except BufferLengthError as e:
            logger.error(f"Patching aborted due to internal buffer error: {e}. Target left unmodified.")
            return False
        except XscPatchError as e:
            logger.error(str(e))
            return False
        return True


def _write_atomic(target: Path, data: bytearray) -> None:
    """Write data to target through a temporary file in the same directory."""
    tmp_path = None
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".part", dir=str(target.parent))
        tmp_path = Path(tmp_name)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        try:
            os.chmod(tmp_path, target.stat().st_mode & 0o7777)
        except OSError as e:
            logger.debug(f"Could not copy file mode to {tmp_path}: {e}")
        os.replace(tmp_path, target)
    except OSError as e:
        raise PatchWriteError(
            f"Failed to write changes to target file {target}: {e}. Restore it from the backup if needed.",
            path=str(target),
        ) from e
    finally:
        if tmp_path is not None and tmp_path.exists():
            try:
                tmp_path.unlink()
            except OSError as e:
                logger.debug(f"Failed to remove temp file {tmp_path}: {e}")


_default_engine = PatchEngine()


def patch_buffer(buffer: bytearray, rules: Rules) -> PatchReport:
    """Patch a buffer with a default engine. See ``PatchEngine.patch_buffer``."""
    return _default_engine.patch_buffer(buffer, rules)


def apply_to_buffer(buffer: bytearray, rules: Rules) -> bytearray:
    """Patch a buffer with a default engine. See ``PatchEngine.apply_to_buffer``."""
    return _default_engine.apply_to_buffer(buffer, rules)


def patch_file(path: Union[str, Path], rules: Rules, dry_run: bool = False) -> PatchReport:
    """Patch a file with a default engine. See ``PatchEngine.patch_file``."""
    return _default_engine.patch_file(path, rules, dry_run=dry_run)


def apply_to_path(path: Union[str, Path], rules: Rules) -> bool:
    """Patch a file with a default engine. See ``PatchEngine.apply_to_path``."""
    return _default_engine.apply_to_path(path, rules)
