from loguru import logger

from logger import AuditLogger


def test_records_writes_and_markers(tmp_path):
    audit = AuditLogger(str(tmp_path), mirror_loguru=False)

    audit.record("alice", "timeout", "90", "10")
    audit.close()
    audit.close()

    lines = open(audit.log_path, encoding="utf-8").read().splitlines()
    assert lines[0].endswith("=== AUDIT START ===")
    assert '"user": "alice"' in lines[1]
    assert '"old": "90"' in lines[1] and '"new": "10"' in lines[1]
    assert sum(line.endswith("=== AUDIT END ===") for line in lines) == 1


def test_mirrors_loguru_until_closed(tmp_path):
    audit = AuditLogger(str(tmp_path))

    logger.info("mirrored message")
    audit.close()
    logger.info("after close")

    content = open(audit.log_path, encoding="utf-8").read()
    assert "mirrored message" in content
    assert "after close" not in content
