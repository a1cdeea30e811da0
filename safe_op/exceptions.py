"""Exceptions raised by safe-op."""

from pathlib import Path
from typing import Union


class SafeOpError(Exception):
    """Base exception for safe-op errors."""
    pass


class NotFoundError(SafeOpError, FileNotFoundError):
    """A file the operation needs does not exist."""
    pass


class SourceNotFoundError(NotFoundError):
    def __init__(self, path: Union[str, Path]):
        super().__init__(f"File not found: {path}")
        self.path = str(path)


class BackupNotFoundError(NotFoundError):
    def __init__(self, path: Union[str, Path]):
        super().__init__(f"Backup not found: {path}")
        self.path = str(path)


class UsageError(SafeOpError):
    """Command line was malformed."""
    pass
