"""Tests for the operation log."""

import json
from datetime import datetime, timezone

from safe_op.backup.log import OperationLog
from safe_op.backup.models import BackupRecord, Operation


def _record(original="/w/a.txt", backup="/b/a.txt.2025-01-01T00-00-00.bak", op=Operation.BACKUP, comment=None):
    return BackupRecord(
        timestamp=datetime(2000, 1, 1, tzinfo=timezone.utc),
        original_path=original,
        backup_path=backup,
        operation=op,
        comment=comment,
    )


def test_missing_log_reads_empty(tmp_path):
    log = OperationLog(tmp_path / "nested" / "operations.jsonl")

    assert log.read() == []
    assert len(log) == 0
    assert not log.path.exists()


def test_append_creates_file_and_restamps(tmp_path):
    log = OperationLog(tmp_path / "nested" / "operations.jsonl")

    written = log.append(_record(comment="first"))

    assert log.path.exists()
    assert written.timestamp.year != 2000
    lines = log.path.read_text().splitlines()
    assert len(lines) == 1
    data = json.loads(lines[0])
    assert data["originalPath"] == "/w/a.txt"
    assert data["backupPath"] == "/b/a.txt.2025-01-01T00-00-00.bak"
    assert data["operation"] == "backup"
    assert data["comment"] == "first"


def test_comment_omitted_when_absent(tmp_path):
    log = OperationLog(tmp_path / "operations.jsonl")
    log.append(_record())

    data = json.loads(log.path.read_text())
    assert "comment" not in data


def test_read_preserves_append_order(tmp_path):
    log = OperationLog(tmp_path / "operations.jsonl")
    log.append(_record(backup="/b/1.bak"))
    log.append(_record(backup="/b/2.bak", op=Operation.RESTORE))
    log.append(_record(backup="/b/3.bak"))

    records = log.read()

    assert [r.backup_path for r in records] == ["/b/1.bak", "/b/2.bak", "/b/3.bak"]
    assert [r.operation for r in records] == [Operation.BACKUP, Operation.RESTORE, Operation.BACKUP]
    assert len(log) == 3
    assert log.read() == records


def test_malformed_lines_are_skipped(tmp_path, caplog):
    log = OperationLog(tmp_path / "operations.jsonl")
    log.append(_record(backup="/b/1.bak"))
    with open(log.path, "a") as f:
        f.write("not json\n")
        f.write('{"operation": "backup"}\n')
        f.write("\n")
    log.append(_record(backup="/b/2.bak"))

    with caplog.at_level("WARNING", logger="safe-op"):
        records = log.read()

    assert [r.backup_path for r in records] == ["/b/1.bak", "/b/2.bak"]
    assert "malformed log line 2" in caplog.text


def test_undecodable_lines_are_skipped(tmp_path, caplog):
    log = OperationLog(tmp_path / "operations.jsonl")
    log.append(_record(backup="/b/1.bak"))
    with open(log.path, "ab") as f:
        f.write(b"\xff\xfe garbage\n")
    log.append(_record(backup="/b/2.bak"))

    with caplog.at_level("WARNING", logger="safe-op"):
        records = log.read()

    assert [r.backup_path for r in records] == ["/b/1.bak", "/b/2.bak"]
    assert "malformed log line 2" in caplog.text
    assert len(log) == 3
    assert log.find_backup("/b/2.bak") is not None


def test_legacy_rollback_records(tmp_path):
    log = OperationLog(tmp_path / "operations.jsonl")
    log.path.write_text(json.dumps({
        "timestamp": "2025-12-30T17:30:00.000Z",
        "originalPath": "/w/main.ts",
        "backupPath": "/b/main.ts.2025-12-30T17-29-00.bak",
        "operation": "rollback",
    }) + "\n")

    records = log.read()

    assert len(records) == 1
    assert records[0].operation == Operation.RESTORE
    assert records[0].original_path == "/w/main.ts"


def test_find_backup_returns_latest_match(tmp_path):
    log = OperationLog(tmp_path / "operations.jsonl")
    artifact = tmp_path / "a.txt.2025-01-01T00-00-00.bak"
    log.append(_record(original="/w/old/a.txt", backup=str(artifact)))
    log.append(_record(original="/w/restored.txt", backup=str(artifact), op=Operation.RESTORE))
    log.append(_record(original="/w/a.txt", backup=str(artifact)))

    match = log.find_backup(artifact)

    assert match is not None
    assert match.original_path == "/w/a.txt"
    assert log.find_backup(tmp_path / "missing.bak") is None
