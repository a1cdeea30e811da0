"""Append-only JSON-lines operation log."""

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from pydantic import ValidationError

from .._utils import logger
from .models import BackupRecord, Operation


class OperationLog:
    """Handle on the operation log file.

    Records are only ever appended. The file and its parent directory are
    created lazily on the first append.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser().resolve()

    def append(self, record: BackupRecord) -> BackupRecord:
        """Append a record, re-stamping its timestamp to the moment of the write.

        Returns:
            The record as written
        """
        written = record.model_copy(update={"timestamp": datetime.now(timezone.utc)})
        line = written.to_json_line() + "\n"

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(line)
            f.flush()
            os.fsync(f.fileno())

        logger.debug(f"Logged {written.operation.value}: {written.backup_path}")
        return written

    def read(self) -> List[BackupRecord]:
        """Read every record in append order.

        A missing log reads as empty. Lines that are not valid records are
        skipped with a warning.
        """
        if not self.path.exists():
            return []

        records = []
        with open(self.path, "rb") as f:
            for lineno, raw in enumerate(f, start=1):
                if not raw.strip():
                    continue
                try:
                    line = raw.decode("utf-8")
                    records.append(BackupRecord.model_validate(json.loads(line)))
                except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
                    logger.warning(f"Skipping malformed log line {lineno} in {self.path}: {e}")

        return records

    def find_backup(self, backup_path: Union[str, Path]) -> Optional[BackupRecord]:
        """Most recent `backup` record that produced the given artifact."""
        target = str(Path(backup_path).expanduser().resolve())
        match = None
        for record in self.read():
            if record.operation == Operation.BACKUP and record.backup_path == target:
                match = record
        return match

    def __len__(self) -> int:
        if not self.path.exists():
            return 0
        with open(self.path, "rb") as f:
            return sum(1 for line in f if line.strip())
