from __future__ import annotations
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict

from .firewall import Dialect


# ----------------------------
# Stored backups
# ----------------------------

class BackupRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    hostname: str
    path: str
    sha256: str
    size: int
    created_at: datetime


class BackupEntry(BaseModel):
    name: str
    path: str
    size: int
    modified_at: datetime


class HostBackups(BaseModel):
    hostname: str
    backups: List[BackupEntry]


# ----------------------------
# Upload outcome
# ----------------------------

class UploadOutcome(BaseModel):
    ok: bool
    client: str
    # success
    hostname: Optional[str] = None
    dialect: Optional[Dialect] = None
    path: Optional[str] = None
    sha256: Optional[str] = None
    # failure
    kind: Optional[str] = None
    detail: Optional[str] = None
    status: int = 200

    def body(self) -> dict:
        return self.model_dump(mode="json", exclude={"status"}, exclude_none=True)
