"""xscpatch CLI - Command-line interface for applying .xsc patch scripts.

This module provides the main CLI entrypoint for xscpatch, wiring the script
parser, backup helper and patch engine together.
"""

import argparse
import logging
import sys
from pathlib import Path

from xscpatch import __version__
from xscpatch.core.backup import create_backup
from xscpatch.core.config import DEFAULT_BACKUP_EXTENSION, as_bool, get_config_value, load_config
from xscpatch.core.engine import PatchEngine
from xscpatch.core.errors import BufferLengthError, PatchWriteError, TargetFileError
from xscpatch.core.parser import ScriptParser
from xscpatch.core.report import write_report

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with apply/check subcommands."""
    parser = argparse.ArgumentParser(
        prog="xscpatch",
        description="xscpatch - Applies XVI32 .xsc patch scripts to binary files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Patch a binary (creates game.exe.bak first)
  xscpatch apply myPatch.xsc ./game/bin/game.exe

  # See what would change without touching the file
  xscpatch apply myPatch.xsc game.exe --dry-run -v

  # Write a YAML report of every replaced offset
  xscpatch apply myPatch.xsc game.exe --report patch-report.yaml

  # Only validate a script
  xscpatch check myPatch.xsc

Note:
  Defaults can be set in xscpatch.json, e.g.
  {"backup": {"extension": ".orig"}, "logging": {"level": "INFO"}}
"""
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Apply command
    apply_parser = subparsers.add_parser(
        "apply",
        help="Apply a patch script to a target file"
    )
    apply_parser.add_argument(
        "script",
        help="Path to the .xsc patch script"
    )
    apply_parser.add_argument(
        "target",
        help="Path to the file to patch"
    )
    apply_parser.add_argument(
        "--no-backup",
        action="store_true",
        help="Do not create a backup copy before patching"
    )
    apply_parser.add_argument(
        "--backup-ext",
        default=None,
        help=f"Backup file extension (default: from config or {DEFAULT_BACKUP_EXTENSION})"
    )
    apply_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Patch in memory only, never write the target or a backup"
    )
    apply_parser.add_argument(
        "--report",
        help="Write a YAML report of the applied rules to this path"
    )
    apply_parser.add_argument(
        "--config",
        default="xscpatch.json",
        help="Path to config file (default: xscpatch.json)"
    )
    apply_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    # Check command
    check_parser = subparsers.add_parser(
        "check",
        help="Parse a patch script and list its rules"
    )
    check_parser.add_argument(
        "script",
        help="Path to the .xsc patch script"
    )
    check_parser.add_argument(
        "--config",
        default="xscpatch.json",
        help="Path to config file (default: xscpatch.json)"
    )
    check_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    return parser


def setup_logging(verbose: bool, config: dict) -> None:
    """Configure root logging from the -v flag and the config file."""
    if verbose:
        level = logging.INFO
    else:
        level_name = str(get_config_value(["logging", "level"], default="WARNING", config=config))
        level = getattr(logging, level_name.upper(), logging.WARNING)
    logging.basicConfig(level=level, format='%(levelname)s: %(message)s')


def main(argv=None):
    """Main CLI entrypoint for xscpatch."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    config = load_config(args.config)
    setup_logging(args.verbose, config)

    # Handle commands
    if args.command == "apply":
        return cmd_apply(args, config)
    elif args.command == "check":
        return cmd_check(args)
    else:
        parser.print_help()
        return 1


def cmd_apply(args, config):
    """Handle apply command."""
    script_path = Path(args.script)
    target_path = Path(args.target)

    print(f"xscpatch v{__version__}")

    # Parse script first so a missing script never leaves a stray backup behind
    rule_set = ScriptParser().parse_path(script_path)
    if rule_set is None:
        print(f"Error: Script file not found or unreadable: {script_path}", file=sys.stderr)
        print("Patching aborted due to script parsing error.", file=sys.stderr)
        return 1

    print(f"Parsed {len(rule_set)} rule(s) from {script_path}")
    for diagnostic in rule_set.warnings:
        print(f"  ! {diagnostic}")

    if not target_path.is_file():
        print(f"Error: Target file not found or is not a file: {target_path}", file=sys.stderr)
        return 1

    # Create backup
    backup_enabled = as_bool(get_config_value(["backup", "enabled"], default=True, config=config))
    if args.no_backup or args.dry_run:
        backup_enabled = False

    if backup_enabled:
        extension = args.backup_ext
        if extension is None:
            extension = get_config_value(["backup", "extension"], default=DEFAULT_BACKUP_EXTENSION, config=config)
        backup = create_backup(target_path, extension)
        if backup is None:
            print("Error: Patching aborted due to backup failure.", file=sys.stderr)
            return 1
        print(f"Backup: {backup}")

    # Apply patch
    try:
        report = PatchEngine().patch_file(target_path, rule_set, dry_run=args.dry_run)
    except BufferLengthError as e:
        print(f"FATAL: {e} (expected {e.expected} bytes, got {e.actual}). Target left unmodified.",
              file=sys.stderr)
        return 1
    except (TargetFileError, PatchWriteError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # Results
    for result in report.rule_results:
        print(f"  Rule {result.index} (line {result.rule.source_line}): "
              f"{result.rule.find_hex} -> {result.rule.replace_hex}: {result.matches} match(es)")
    print(f"Total replacements: {report.total_matches}")

    if args.report:
        try:
            report_path = write_report(args.report, report, rule_set)
            print(f"Report: {report_path}")
        except OSError as e:
            logger.warning(f"Could not write report to {args.report}: {e}")

    if args.dry_run:
        print("Dry run: target not written")
    elif report.written:
        print(f"✅ Patched: {target_path}")
    else:
        print("No matching byte sequences found, target unchanged")
    return 0


def cmd_check(args):
    """Handle check command."""
    script_path = Path(args.script)

    rule_set = ScriptParser().parse_path(script_path)
    if rule_set is None:
        print(f"Error: Script file not found or unreadable: {script_path}", file=sys.stderr)
        return 1

    print(f"{script_path}: {len(rule_set)} valid rule(s)")
    for rule in rule_set:
        print(f"  line {rule.source_line}: {rule.find_hex} -> {rule.replace_hex} ({len(rule)} bytes)")

    for diagnostic in rule_set.warnings:
        print(f"  ! {diagnostic}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
