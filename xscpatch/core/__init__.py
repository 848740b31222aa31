"""
Core components of xscpatch.

This package contains the rule schema, the ``.xsc`` script parser, the
buffer-patching engine and the small file helpers (backup, report, config)
that the command-line driver composes.
"""

__all__ = []
