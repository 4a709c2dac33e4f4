from fastapi import APIRouter, Depends, HTTPException, Request
from pathlib import Path
import difflib

from ..schemas.backup import HostBackups
from ..services.errors import InvalidHostname
from ..services.store import BackupStore

router = APIRouter(prefix="/backups", tags=["backups"])


def get_store(request: Request) -> BackupStore:
    return request.app.state.store


def _backups_or_404(store: BackupStore, hostname: str):
    try:
        backups = store.list_backups(hostname)
    except InvalidHostname as e:
        raise HTTPException(400, e.message)
    if not backups:
        raise HTTPException(404, "No backups for host")
    return backups


@router.get("")
def list_hosts(store: BackupStore = Depends(get_store)):
    return {"hosts": store.list_hosts()}


@router.get("/{hostname}", response_model=HostBackups)
def list_host_backups(hostname: str, store: BackupStore = Depends(get_store)):
    return HostBackups(hostname=hostname, backups=_backups_or_404(store, hostname))


@router.get("/{hostname}/diff")
def backup_diff(hostname: str, store: BackupStore = Depends(get_store)):
    backups = _backups_or_404(store, hostname)
    if len(backups) < 2:
        return {"ok": False, "detail": "Need at least two backups to diff."}
    a, b = backups[-2], backups[-1]  # older, newer
    old = Path(a.path).read_text(errors="ignore").splitlines(keepends=True)
    new = Path(b.path).read_text(errors="ignore").splitlines(keepends=True)
    diff = difflib.unified_diff(old, new, fromfile=a.name, tofile=b.name)
    return {"ok": True, "from": a.path, "to": b.path, "diff": "".join(diff)}
