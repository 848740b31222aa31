"""Backup copies of patch targets.

Before a target is modified, a byte-for-byte copy is written next to it
(``game.exe`` -> ``game.exe.bak``). If that copy cannot be made the patch must
not proceed.
"""

import logging
import shutil
from pathlib import Path
from typing import Optional, Union

from xscpatch.core.config import DEFAULT_BACKUP_EXTENSION

logger = logging.getLogger(__name__)


def backup_path_for(target: Union[str, Path], extension: str = DEFAULT_BACKUP_EXTENSION) -> Path:
    """Return the backup path for a target (the extension is appended, not substituted)."""
    target_path = Path(target)
    return target_path.with_name(target_path.name + extension)


def create_backup(target: Union[str, Path], extension: str = DEFAULT_BACKUP_EXTENSION) -> Optional[Path]:
    """Copy the target file to ``target + extension``.

    An existing backup file is overwritten after a warning.

    Args:
        target: File to back up
        extension: Suffix appended to the target name (default: ".bak")

    Returns:
        Path of the created backup, or None if the target is missing, not a
        regular file, or the copy failed

    Example:
        >>> create_backup("game.exe")
        PosixPath('game.exe.bak')
    """
    target_path = Path(target)
    backup_path = backup_path_for(target_path, extension)
    logger.info(f"Attempting to create backup: {backup_path}")

    if not target_path.is_file():
        logger.error(f"Target file not found or is not a file: {target_path}")
        return None

    if backup_path.exists() and not backup_path.is_file():
        logger.error(f"Backup path exists and is not a regular file: {backup_path}")
        return None

    if backup_path.exists():
        logger.warning(f"Backup file already exists. Overwriting: {backup_path}")

    try:
        shutil.copy2(target_path, backup_path)
    except OSError as e:
        logger.error(f"Failed to create backup for {target_path}: {e}")
        return None

    logger.info(f"Successfully created backup: {backup_path}")
    return backup_path
