"""Tests for backup creation."""

import logging

from xscpatch.core.backup import backup_path_for, create_backup


class TestBackupPath:
    """Tests for backup path derivation."""

    def test_extension_appended(self, tmp_path):
        """Test that the extension is appended to the full name."""
        assert backup_path_for(tmp_path / "game.exe").name == "game.exe.bak"

    def test_custom_extension(self, tmp_path):
        """Test a custom backup extension."""
        assert backup_path_for(tmp_path / "rom.sfc", ".orig").name == "rom.sfc.orig"


class TestCreateBackup:
    """Tests for create_backup."""

    def test_creates_copy(self, tmp_path):
        """Test that a byte-identical copy is created."""
        target = tmp_path / "game.exe"
        target.write_bytes(b"\x00\x01\x02")

        backup = create_backup(target)

        assert backup == tmp_path / "game.exe.bak"
        assert backup.read_bytes() == b"\x00\x01\x02"
        assert target.read_bytes() == b"\x00\x01\x02"

    def test_missing_target_returns_none(self, tmp_path):
        """Test that a missing target yields None."""
        assert create_backup(tmp_path / "missing.exe") is None
        assert list(tmp_path.iterdir()) == []

    def test_directory_target_returns_none(self, tmp_path):
        """Test that a directory cannot be backed up."""
        assert create_backup(tmp_path) is None

    def test_existing_backup_overwritten_with_warning(self, tmp_path, caplog):
        """Test warn-and-overwrite of an existing backup."""
        target = tmp_path / "game.exe"
        target.write_bytes(b"new")
        (tmp_path / "game.exe.bak").write_bytes(b"old")

        with caplog.at_level(logging.WARNING, logger="xscpatch.core.backup"):
            backup = create_backup(target)

        assert backup is not None
        assert backup.read_bytes() == b"new"
        assert "already exists" in caplog.text

    def test_backup_path_is_directory(self, tmp_path):
        """Test that a directory in the backup location is not reported as a backup."""
        target = tmp_path / "game.exe"
        target.write_bytes(b"data")
        (tmp_path / "game.exe.bak").mkdir()

        assert create_backup(target) is None
        assert not (tmp_path / "game.exe.bak" / "game.exe").exists()

    def test_copy_failure_returns_none(self, tmp_path, monkeypatch):
        """Test that an OSError during copy yields None."""
        target = tmp_path / "game.exe"
        target.write_bytes(b"data")

        def fail_copy(src, dst):
            raise PermissionError("denied")

        monkeypatch.setattr("xscpatch.core.backup.shutil.copy2", fail_copy)

        assert create_backup(target) is None
