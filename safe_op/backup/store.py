"""Backup store: copy files aside before risky edits and put them back."""

import glob
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from pydantic import ValidationError

from .._utils import logger
from ..config import BackupConfig, BackupOptions
from ..exceptions import BackupNotFoundError, SourceNotFoundError
from .log import OperationLog
from .models import ArtifactMetadata, BackupRecord, Operation
from .utils import (
    ARTIFACT_SUFFIX,
    artifact_name,
    compute_checksum,
    copy_file_bytes,
    fsync_directory,
    generate_timestamp,
    metadata_path,
    parse_artifact_name,
    strip_artifact_suffix,
    verify_checksum,
)

PathLike = Union[str, Path]


class BackupStore:
    """Timestamped file backups with an append-only operation log."""

    def __init__(self, config: Optional[BackupConfig] = None, log: Optional[OperationLog] = None):
        """Initialize backup store.

        Args:
            config: Store configuration. Defaults to `BackupConfig()`.
            log: Operation log handle. Defaults to the log file inside the
                configured backup directory.
        """
        self.config = config if config is not None else BackupConfig()
        self.backup_dir = self.config.backup_root
        self.log = log if log is not None else OperationLog(self.config.log_path)

    def backup(self, path: PathLike, options: Optional[BackupOptions] = None) -> Path:
        """Copy a file into the backup directory and record the operation.

        Args:
            path: File to back up
            options: Retention count and comment. Defaults to `BackupOptions()`.

        Returns:
            Absolute path of the new artifact
        """
        options = options or BackupOptions()
        source = Path(path).expanduser().resolve()

        if not source.is_file():
            raise SourceNotFoundError(source)

        self.backup_dir.mkdir(parents=True, exist_ok=True)
        artifact = self._next_artifact_path(source.name)

        size = copy_file_bytes(source, artifact)
        fsync_directory(self.backup_dir)
        if self.config.write_metadata:
            self._write_metadata(artifact, source, size, options.comment)

        self.log.append(BackupRecord(
            timestamp=datetime.now(timezone.utc),
            original_path=str(source),
            backup_path=str(artifact),
            operation=Operation.BACKUP,
            comment=options.comment,
        ))
        logger.info(f"Backup created: {artifact} ({size:,} bytes)")

        if options.max_backups:
            self.clean(source, options.max_backups)

        return artifact

    def restore(self, backup_path: PathLike, target_path: Optional[PathLike] = None) -> Path:
        """Copy an artifact's bytes over its original file (or `target_path`).

        The destination is overwritten without a backup of its current state.

        Returns:
            Absolute path that was written
        """
        artifact = Path(backup_path).expanduser().resolve()
        if not artifact.is_file():
            raise BackupNotFoundError(backup_path)

        metadata = self._read_metadata(artifact)
        if target_path:
            target = Path(target_path).expanduser().resolve()
        else:
            target = self.resolve_target(artifact, metadata)

        if metadata is not None and not verify_checksum(artifact, metadata.checksum):
            logger.warning(f"Checksum mismatch for {artifact}! Expected: {metadata.checksum}")

        target.parent.mkdir(parents=True, exist_ok=True)
        copy_file_bytes(artifact, target)

        self.log.append(BackupRecord(
            timestamp=datetime.now(timezone.utc),
            original_path=str(target),
            backup_path=str(artifact),
            operation=Operation.RESTORE,
        ))
        logger.info(f"Restored {artifact} -> {target}")

        return target

    def list(self, path: Optional[PathLike] = None) -> List[BackupRecord]:
        """Log records in write order, optionally only those touching `path`."""
        records = self.log.read()
        if path is None:
            return records

        resolved = Path(path).expanduser().resolve()
        return [
            r for r in records
            if Path(r.original_path).resolve() == resolved or Path(r.backup_path).resolve() == resolved
        ]

    def find_artifacts(self, path: PathLike) -> List[Path]:
        """Artifacts for a file's base name, most recently modified first."""
        name = Path(path).name
        if not self.backup_dir.is_dir():
            return []

        artifacts = []
        for candidate in self.backup_dir.glob(f"{glob.escape(name)}.*{ARTIFACT_SUFFIX}"):
            parsed = parse_artifact_name(candidate.name)
            if parsed is None or parsed[0] != name or not candidate.is_file():
                continue
            artifacts.append((candidate.stat().st_mtime_ns, parsed[1], parsed[2], candidate))

        artifacts.sort(key=lambda a: a[:3], reverse=True)
        return [a[3] for a in artifacts]

    def clean(self, path: PathLike, keep: int) -> List[Path]:
        """Delete all but the `keep` most recent artifacts of a file.

        Log records are left in place.

        Returns:
            Deleted artifact paths
        """
        if keep < 0:
            raise ValueError(f"keep must be non-negative, got {keep}")

        deleted = []
        for artifact in self.find_artifacts(path)[keep:]:
            artifact.unlink()
            sidecar = metadata_path(artifact)
            if sidecar.exists():
                sidecar.unlink()
            logger.debug(f"Removed backup: {artifact}")
            deleted.append(artifact)

        if deleted:
            logger.info(f"Cleaned {len(deleted)} backup(s) of {Path(path).name}, kept {keep}")
        return deleted

    def prune_all(self, keep: Optional[int] = None) -> int:
        """Apply `clean` to every artifact family in the backup directory.

        Returns:
            Number of deleted artifacts
        """
        keep = self.config.clean_keep if keep is None else keep
        if not self.backup_dir.is_dir():
            return 0

        families = set()
        for candidate in self.backup_dir.glob(f"*{ARTIFACT_SUFFIX}"):
            parsed = parse_artifact_name(candidate.name)
            if parsed is not None:
                families.add(parsed[0])

        deleted = 0
        for name in sorted(families):
            deleted += len(self.clean(name, keep))
        return deleted

    def resolve_target(self, artifact: Path, metadata: Optional[ArtifactMetadata] = None) -> Path:
        """Work out where an artifact came from.

        Tries the sidecar, then the operation log, then the artifact's name.
        """
        if metadata is not None:
            return Path(metadata.original_path)

        record = self.log.find_backup(artifact)
        if record is not None:
            return Path(record.original_path)

        if artifact.parent == self.backup_dir:
            target = self._anchor_dir() / strip_artifact_suffix(artifact).name
        else:
            target = strip_artifact_suffix(artifact)
        logger.warning(f"No recorded origin for {artifact.name}, restoring to {target}")
        return target

    # Private helper methods

    def _next_artifact_path(self, filename: str) -> Path:
        """Pick an unused artifact path for `filename` at the current second."""
        timestamp = generate_timestamp()
        seq = 0
        while True:
            candidate = self.backup_dir / artifact_name(filename, timestamp, seq)
            if not candidate.exists():
                return candidate
            seq += 1

    def _anchor_dir(self) -> Path:
        """Directory a relative backup_dir hangs off (the project root)."""
        configured = Path(self.config.backup_dir).expanduser()
        if configured.is_absolute() or ".." in configured.parts:
            return Path.cwd()
        anchor = self.backup_dir
        for _ in configured.parts:
            anchor = anchor.parent
        return anchor

    def _write_metadata(self, artifact: Path, source: Path, size: int, comment: Optional[str]) -> None:
        metadata = ArtifactMetadata(
            original_path=str(source),
            created_at=datetime.now(timezone.utc),
            checksum=compute_checksum(artifact),
            size_bytes=size,
            comment=comment,
        )
        metadata_path(artifact).write_text(
            metadata.model_dump_json(by_alias=True, exclude_none=True, indent=2),
            encoding="utf-8",
        )

    def _read_metadata(self, artifact: Path) -> Optional[ArtifactMetadata]:
        sidecar = metadata_path(artifact)
        if not sidecar.exists():
            return None
        try:
            return ArtifactMetadata.model_validate_json(sidecar.read_text(encoding="utf-8"))
        except ValidationError as e:
            logger.warning(f"Ignoring unreadable metadata {sidecar.name}: {e}")
            return None
