from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from backup_sense.config import Settings
from backup_sense.main import create_app
from backup_sense.services.intake import IntakePipeline
from backup_sense.services.store import BackupStore

PFSENSE_XML = (
    b"<pfsense><system><hostname>fw1</hostname>"
    b"<domain>example.com</domain></system></pfsense>"
)
OPNSENSE_XML = b"<opnsense><system><hostname>edge01</hostname></system></opnsense>"

FIXED_NOW = datetime(2026, 10, 18, 12, 30, 45, tzinfo=timezone.utc)


@pytest.fixture
def backup_root(tmp_path):
    return tmp_path / "backup"


@pytest.fixture
def store(backup_root):
    """Store with a frozen clock so file names are predictable."""
    return BackupStore(backup_root, clock=lambda: FIXED_NOW)


@pytest.fixture
def pipeline(store):
    return IntakePipeline(store, max_bytes=10 << 20)


@pytest.fixture
def settings(backup_root):
    return Settings(backup_dir=backup_root, max_upload_mb=1)


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c
