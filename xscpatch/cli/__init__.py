"""Command-line interface for xscpatch."""
