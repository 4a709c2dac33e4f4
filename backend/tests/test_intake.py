"""
Tests for the upload intake pipeline.
"""

from pathlib import Path

import pytest

from backup_sense.schemas.firewall import Dialect
from backup_sense.services import intake
from backup_sense.services.intake import IntakePipeline
from backup_sense.services.store import BackupStore

from conftest import OPNSENSE_XML, PFSENSE_XML


def _files(root: Path):
    return [p for p in root.rglob("*") if p.is_file()] if root.exists() else []


class TestIntakeSuccess:

    def test_pfsense_scenario(self, pipeline, backup_root):
        outcome = pipeline.submit(PFSENSE_XML, "10.0.0.1")

        assert outcome.ok
        assert outcome.client == "10.0.0.1"
        assert outcome.hostname == "fw1.example.com"
        assert outcome.dialect is Dialect.PFSENSE
        path = Path(outcome.path)
        assert path == backup_root.resolve() / "fw1.example.com" / "fw1.example.com-20261018-123045.xml"
        assert path.read_bytes() == PFSENSE_XML

    def test_opnsense_scenario(self, pipeline, backup_root):
        outcome = pipeline.submit(OPNSENSE_XML, "10.0.0.2")

        assert outcome.ok
        assert outcome.hostname == "edge01"
        assert Path(outcome.path).parent == backup_root.resolve() / "edge01"

    def test_payload_at_limit_is_accepted(self, store):
        p = IntakePipeline(store, max_bytes=len(OPNSENSE_XML))
        assert p.submit(OPNSENSE_XML, "c").ok


class TestIntakeFailure:

    def test_junk_is_unsupported_and_creates_nothing(self, pipeline, backup_root):
        outcome = pipeline.submit(b"<junk/>", "10.0.0.3")

        assert not outcome.ok
        assert outcome.kind == "UnsupportedDialect"
        assert outcome.status == 400
        assert not backup_root.exists()

    def test_oversized_rejected_before_decoding(self, store, backup_root, monkeypatch):
        def must_not_run(payload):
            raise AssertionError("detection ran on an oversized payload")

        monkeypatch.setattr(intake, "detect_dialect", must_not_run)
        p = IntakePipeline(store, max_bytes=10 << 20)
        payload = PFSENSE_XML + b" " * (15 << 20)

        outcome = p.submit(payload, "10.0.0.4")

        assert outcome.kind == "PayloadTooLarge"
        assert outcome.status == 413
        assert _files(backup_root) == []

    def test_declared_size_checked(self, pipeline):
        outcome = pipeline.submit(PFSENSE_XML, "c", declared_size=(10 << 20) + 1)
        assert outcome.kind == "PayloadTooLarge"

    def test_lying_declared_size_still_rejected(self, store):
        p = IntakePipeline(store, max_bytes=16)
        outcome = p.submit(PFSENSE_XML, "c", declared_size=1)
        assert outcome.kind == "PayloadTooLarge"

    @pytest.mark.parametrize("payload", [
        b"<pfsense><system><hostname></hostname><domain>example.com</domain></system></pfsense>",
        b"<opnsense><system><hostname/></system></opnsense>",
    ])
    def test_empty_hostname_writes_nothing(self, pipeline, backup_root, payload):
        outcome = pipeline.submit(payload, "c")
        assert outcome.kind == "MissingHostname"
        assert _files(backup_root) == []

    def test_malformed(self, pipeline):
        outcome = pipeline.submit(b"<pfsense><system><hostname>fw1</hostname>", "c")
        assert outcome.kind == "MalformedConfig"
        assert "pfSense parse error" in outcome.detail

    def test_path_traversal_hostname(self, pipeline, backup_root, tmp_path):
        payload = b"<opnsense><system><hostname>../../etc</hostname></system></opnsense>"
        outcome = pipeline.submit(payload, "c")

        assert outcome.kind == "InvalidHostname"
        assert outcome.status == 400
        assert _files(tmp_path) == []

    def test_traversal_through_domain(self, pipeline, tmp_path):
        payload = b"<pfsense><system><hostname>fw</hostname><domain>/../../x</domain></system></pfsense>"
        assert pipeline.submit(payload, "c").kind == "InvalidHostname"
        assert _files(tmp_path) == []

    def test_overlong_hostname_is_client_error(self, pipeline, backup_root):
        hostname = ".".join(["c" * 60] * 4).encode()
        payload = b"<opnsense><system><hostname>" + hostname + b"</hostname></system></opnsense>"

        outcome = pipeline.submit(payload, "c")

        assert outcome.kind == "InvalidHostname"
        assert outcome.status == 400
        assert not backup_root.exists()

    def test_storage_failure_is_server_error(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        p = IntakePipeline(BackupStore(blocker), max_bytes=1 << 20)

        outcome = p.submit(PFSENSE_XML, "c")

        assert outcome.kind == "DirectoryCreateFailed"
        assert outcome.status == 500

    def test_failure_is_logged_with_client(self, pipeline, caplog):
        with caplog.at_level("WARNING", logger="backup_sense.services.intake"):
            pipeline.submit(b"<junk/>", "192.0.2.7")
        assert "UnsupportedDialect from 192.0.2.7" in caplog.text

    def test_body_never_echoes_payload(self, pipeline):
        outcome = pipeline.submit(b"<junk>secret-material</junk>", "c")
        assert "secret-material" not in str(outcome.body())
