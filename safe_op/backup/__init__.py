"""Backup store, operation log and their data models."""

from .log import OperationLog
from .models import ArtifactMetadata, BackupRecord, Operation
from .store import BackupStore

__all__ = ["BackupStore", "OperationLog", "BackupRecord", "ArtifactMetadata", "Operation"]
