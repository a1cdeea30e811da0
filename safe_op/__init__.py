from .config import BackupConfig, BackupOptions
from .backup import BackupStore, OperationLog, BackupRecord, Operation

__version__ = "0.1.0"
__author__ = "safe-op contributors"
__url__ = "https://github.com/safe-op/safe-op"

__all__ = [
    "BackupConfig",
    "BackupOptions",
    "BackupStore",
    "OperationLog",
    "BackupRecord",
    "Operation",
]
