"""Utility functions for backup/restore operations."""

import hashlib
import os
import re
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

ARTIFACT_SUFFIX = ".bak"
METADATA_SUFFIX = ".meta.json"

# <name>.<YYYY-MM-DDTHH-MM-SS>[-<n>].bak
_ARTIFACT_RE = re.compile(
    r"^(?P<name>.+)\.(?P<ts>\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2})(?:-(?P<seq>\d+))?\.bak$"
)


def generate_timestamp(now: Optional[datetime] = None) -> str:
    """Render a UTC time at one-second granularity for artifact names.

    Returns:
        Timestamp in format YYYY-MM-DDTHH-MM-SS
    """
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S")


def artifact_name(filename: str, timestamp: str, seq: int = 0) -> str:
    """Build an artifact file name; `seq` disambiguates same-second backups."""
    if seq:
        return f"{filename}.{timestamp}-{seq}{ARTIFACT_SUFFIX}"
    return f"{filename}.{timestamp}{ARTIFACT_SUFFIX}"


def parse_artifact_name(name: str) -> Optional[Tuple[str, str, int]]:
    """Split an artifact file name into (original name, timestamp, seq).

    Returns None for names that do not follow the artifact pattern.
    """
    match = _ARTIFACT_RE.match(name)
    if not match:
        return None
    return match.group("name"), match.group("ts"), int(match.group("seq") or 0)


def strip_artifact_suffix(path: Path) -> Path:
    """Derive an original path from an artifact path by dropping the timestamp suffix.

    Only the file name can be recovered this way; the directory is the
    artifact's own directory. Names that do not match the pattern are
    returned unchanged.
    """
    parsed = parse_artifact_name(path.name)
    if parsed is None:
        return path
    return path.with_name(parsed[0])


def metadata_path(artifact: Path) -> Path:
    return artifact.with_name(artifact.name + METADATA_SUFFIX)


def copy_file_bytes(source: Path, destination: Path) -> int:
    """Copy file contents verbatim and return the number of bytes written.

    Metadata is not copied, so the destination gets a fresh modification time.
    """
    shutil.copyfile(source, destination)
    with open(destination, "rb+") as f:
        os.fsync(f.fileno())
    return destination.stat().st_size


def fsync_directory(directory: Path) -> None:
    """Flush a directory entry so newly created files survive a crash."""
    if os.name == "nt":
        return
    fd = os.open(directory, os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


def compute_checksum(file_path: Path) -> str:
    """Compute SHA-256 checksum of file.

    Args:
        file_path: Path to file

    Returns:
        SHA-256 checksum as hex string with 'sha256:' prefix
    """
    sha256 = hashlib.sha256()

    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            sha256.update(chunk)

    return f"sha256:{sha256.hexdigest()}"


def verify_checksum(file_path: Path, expected_checksum: str) -> bool:
    """Verify file checksum against an expected 'sha256:' value."""
    return compute_checksum(file_path) == expected_checksum
