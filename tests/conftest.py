"""Global pytest configuration and fixtures."""

import pytest
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from safe_op.config import BackupConfig
from safe_op.backup import BackupStore


@pytest.fixture
def backup_config(tmp_path):
    """Config pointing at an isolated backup directory."""
    return BackupConfig(backup_dir=str(tmp_path / "backups"))


@pytest.fixture
def store(backup_config):
    """Backup store with its own backup directory and log."""
    return BackupStore(backup_config)


@pytest.fixture
def work_dir(tmp_path):
    """Directory holding the files under test."""
    path = tmp_path / "work"
    path.mkdir()
    return path
