"""Data models for backup/restore operations."""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class Operation(str, Enum):
    """Action that produced a log record."""
    BACKUP = "backup"
    RESTORE = "restore"


class BackupRecord(BaseModel):
    """One line of the operation log.

    Serialized with camelCase keys so logs stay readable by the existing
    dashboards.
    """

    model_config = ConfigDict(populate_by_name=True)

    timestamp: datetime = Field(..., description="Time the record was written")
    original_path: str = Field(..., alias="originalPath", description="File backed up or restored into")
    backup_path: str = Field(..., alias="backupPath", description="Backup artifact path")
    operation: Operation = Field(..., description="backup or restore")
    comment: Optional[str] = Field(None, description="Free-text annotation")

    @field_validator("operation", mode="before")
    @classmethod
    def normalize_operation(cls, v):
        # Older logs tag restores as "rollback"
        if v == "rollback":
            return Operation.RESTORE
        return v

    def to_json_line(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)

    @property
    def timestamp_text(self) -> str:
        """Timestamp as written to the log (UTC, `Z` suffix)."""
        return self.model_dump(mode="json", include={"timestamp"})["timestamp"]


class ArtifactMetadata(BaseModel):
    """Sidecar record stored next to each backup artifact."""

    model_config = ConfigDict(populate_by_name=True)

    original_path: str = Field(..., alias="originalPath")
    created_at: datetime = Field(..., alias="createdAt")
    checksum: str = Field(..., description="SHA-256 checksum of the artifact bytes")
    size_bytes: int = Field(..., alias="sizeBytes")
    comment: Optional[str] = None
