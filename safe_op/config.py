"""Configuration management for safe-op."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


DEFAULT_BACKUP_DIR = os.path.join(".context", "backups")
DEFAULT_MAX_BACKUPS = 10


@dataclass(frozen=True)
class BackupConfig:
    """Backup store configuration."""
    backup_dir: str = DEFAULT_BACKUP_DIR
    log_filename: str = "operations.jsonl"
    max_backups: int = DEFAULT_MAX_BACKUPS  # retention applied by the CLI after each backup
    clean_keep: int = 5  # retention used by `prune`
    write_metadata: bool = True

    @classmethod
    def from_env(cls) -> 'BackupConfig':
        """Create config from environment variables."""
        return cls(
            backup_dir=os.getenv("SAFE_OP_BACKUP_DIR", DEFAULT_BACKUP_DIR),
            log_filename=os.getenv("SAFE_OP_LOG_FILENAME", "operations.jsonl"),
            max_backups=int(os.getenv("SAFE_OP_MAX_BACKUPS", str(DEFAULT_MAX_BACKUPS))),
            clean_keep=int(os.getenv("SAFE_OP_CLEAN_KEEP", "5")),
            write_metadata=os.getenv("SAFE_OP_WRITE_METADATA", "true").lower() == "true",
        )

    def __post_init__(self):
        """Validate configuration."""
        if not self.backup_dir:
            raise ValueError("backup_dir must not be empty")
        if not self.log_filename or os.sep in self.log_filename:
            raise ValueError(f"log_filename must be a bare file name, got {self.log_filename!r}")
        if self.max_backups < 0:
            raise ValueError(f"max_backups must be non-negative, got {self.max_backups}")
        if self.clean_keep < 0:
            raise ValueError(f"clean_keep must be non-negative, got {self.clean_keep}")

    @property
    def backup_root(self) -> Path:
        """Absolute backup directory."""
        return Path(self.backup_dir).expanduser().resolve()

    @property
    def log_path(self) -> Path:
        return self.backup_root / self.log_filename


@dataclass(frozen=True)
class BackupOptions:
    """Per-call options for `BackupStore.backup`.

    `max_backups` of None or 0 skips the retention pass after the copy.
    """
    max_backups: Optional[int] = DEFAULT_MAX_BACKUPS
    comment: Optional[str] = None

    def __post_init__(self):
        """Validate options."""
        if self.max_backups is not None and self.max_backups < 0:
            raise ValueError(f"max_backups must be non-negative, got {self.max_backups}")
