"""
Tests for the audit log — line format, append-only sink, sink failures.
"""

from datetime import datetime

from kubeconsole.core.persistence.audit import AuditEntry, AuditLog


class TestAuditEntry:
    def test_format(self):
        entry = AuditEntry(level="error", timestamp=datetime(2026, 10, 18, 9, 5, 3), message="boom")
        assert entry.format() == "[ERROR] 2026-10-18 09:05:03 boom"

    def test_parse(self):
        entry = AuditEntry.parse("[INFO] 2026-10-18 14:02:11 Starting Minikube...\n")
        assert entry.level == "info"
        assert entry.timestamp == datetime(2026, 10, 18, 14, 2, 11)
        assert entry.message == "Starting Minikube..."

    def test_parse_rejects_garbage(self):
        assert AuditEntry.parse("not an audit line") is None
        assert AuditEntry.parse("[WARN] 2026-10-18 14:02:11 nope") is None


class TestAuditLog:
    def test_appends_lines(self, tmp_path):
        path = tmp_path / "k8s_setup.log"
        log = AuditLog(path, echo=False)
        log.info("first")
        log.error("second")
        log.close()

        lines = path.read_text().splitlines()
        assert len(lines) == 2
        assert lines[0].startswith("[INFO] ")
        assert lines[0].endswith(" first")
        assert lines[1].startswith("[ERROR] ")

    def test_never_truncates_existing_file(self, tmp_path):
        path = tmp_path / "k8s_setup.log"
        path.write_text("[INFO] 2026-01-01 00:00:00 earlier session\n")
        log = AuditLog(path, echo=False)
        log.info("this session")
        log.close()

        messages = [e.message for e in AuditLog(path, echo=False).entries()]
        assert messages == ["earlier session", "this session"]

    def test_entry_durable_before_close(self, tmp_path):
        path = tmp_path / "k8s_setup.log"
        log = AuditLog(path, echo=False)
        log.info("flushed")
        assert "flushed" in path.read_text()
        log.close()

    def test_echo(self, tmp_path, capsys):
        log = AuditLog(tmp_path / "a.log")
        log.info("visible")
        log.close()
        assert "visible" in capsys.readouterr().out

    def test_sink_failure_is_not_fatal(self, tmp_path, capsys):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        log = AuditLog(blocker / "k8s_setup.log", echo=False)

        log.info("one")
        log.error("two")

        assert log.sink_failed
        err = capsys.readouterr().err
        assert err.count("Audit log unavailable") == 1

    def test_read_recent(self, tmp_path):
        log = AuditLog(tmp_path / "a.log", echo=False)
        for i in range(5):
            log.info(f"msg {i}")
        assert [e.message for e in log.read_recent(2)] == ["msg 3", "msg 4"]
        log.close()

    def test_missing_file_has_no_entries(self, tmp_path):
        assert AuditLog(tmp_path / "none.log", echo=False).entries() == []

    def test_multi_line_message_is_one_entry(self, tmp_path):
        path = tmp_path / "a.log"
        log = AuditLog(path, echo=False)
        log.error('Scale failed: Error from server (NotFound):\ndeployments.apps "ghost" not found\n')
        log.info("next")
        log.close()

        assert len(path.read_text().splitlines()) == 2
        entries = log.entries()
        assert entries[0].message == (
            'Scale failed: Error from server (NotFound): | deployments.apps "ghost" not found'
        )
        assert entries[1].message == "next"

    def test_read_recent_non_positive(self, tmp_path):
        log = AuditLog(tmp_path / "a.log", echo=False)
        log.info("only")
        assert log.read_recent(0) == []
        assert log.read_recent(-3) == []
        log.close()
