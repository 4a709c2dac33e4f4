from __future__ import annotations
import contextlib
import hashlib
import logging
import os
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from ..schemas.backup import BackupEntry, BackupRecord
from .errors import DirectoryCreateFailed, InvalidHostname, WriteFailed

logger = logging.getLogger(__name__)

DIR_MODE = 0o755
FILE_MODE = 0o644
TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"
MAX_SUFFIX = 1000
MAX_FILENAME = 255
# Longest file name is <hostname>-YYYYmmdd-HHMMSS-999.xml (suffix bounded by MAX_SUFFIX)
MAX_HOSTNAME = MAX_FILENAME - len("-YYYYmmdd-HHMMSS-999.xml")

HOSTNAME_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9._-]*")


def _sha256_bytes(data: bytes) -> str:
    h = hashlib.sha256(); h.update(data); return h.hexdigest()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BackupStore:
    """Per-host backup files under a single root.

    Layout: <root>/<hostname>/<hostname>-<YYYYmmdd-HHMMSS>[-n].xml
    Files are never updated or deleted once written.
    """

    def __init__(self, root: Union[str, Path], clock: Optional[Callable[[], datetime]] = None) -> None:
        self.root = Path(root).resolve()
        self._clock = clock or _utcnow

    def host_dir(self, hostname: str) -> Path:
        if not HOSTNAME_RE.fullmatch(hostname) or ".." in hostname:
            raise InvalidHostname(f"hostname not usable as a directory name: {hostname!r}")
        if len(hostname) > MAX_HOSTNAME:
            raise InvalidHostname(f"hostname longer than {MAX_HOSTNAME} characters: {hostname[:32]!r}...")
        path = (self.root / hostname).resolve()
        if path.parent != self.root:
            raise InvalidHostname(f"hostname escapes backup root: {hostname!r}")
        return path

    def ensure_host_dir(self, hostname: str) -> Path:
        path = self.host_dir(hostname)
        try:
            path.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryCreateFailed(f"failed to create directory: {e}") from e
        return path

    def _create_exclusive(self, host_dir: Path, hostname: str, stamp: str) -> Tuple[Path, int]:
        # Same host within the same second gets -1, -2, ... instead of overwriting.
        for n in range(MAX_SUFFIX):
            suffix = f"-{n}" if n else ""
            path = host_dir / f"{hostname}-{stamp}{suffix}.xml"
            try:
                fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, FILE_MODE)
            except FileExistsError:
                continue
            except OSError as e:
                raise WriteFailed(f"failed to write file: {e}") from e
            if n:
                logger.info("Backup name collision for %s at %s, using suffix -%d", hostname, stamp, n)
            return path, fd
        raise WriteFailed(f"failed to write file: no free name for {hostname} at {stamp}")

    def save(self, hostname: str, content: bytes) -> BackupRecord:
        host_dir = self.ensure_host_dir(hostname)
        created_at = self._clock()
        path, fd = self._create_exclusive(host_dir, hostname, created_at.strftime(TIMESTAMP_FORMAT))
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(content)
                fh.flush()
                os.fsync(fh.fileno())
        except OSError as e:
            with contextlib.suppress(OSError):
                path.unlink()
            raise WriteFailed(f"failed to write file: {e}") from e

        return BackupRecord(
            hostname=hostname,
            path=str(path),
            sha256=_sha256_bytes(content),
            size=len(content),
            created_at=created_at,
        )

    # -------------------------------
    # Read side
    # -------------------------------

    def list_hosts(self) -> List[str]:
        if not self.root.is_dir():
            return []
        return sorted(p.name for p in self.root.iterdir() if p.is_dir() and HOSTNAME_RE.fullmatch(p.name))

    def list_backups(self, hostname: str) -> List[BackupEntry]:
        """Backups for `hostname`, oldest first (by embedded timestamp, then suffix)."""
        host_dir = self.host_dir(hostname)
        if not host_dir.is_dir():
            return []
        name_re = re.compile(rf"{re.escape(hostname)}-(\d{{8}}-\d{{6}})(?:-(\d+))?\.xml")
        entries = []
        for p in host_dir.iterdir():
            m = name_re.fullmatch(p.name)
            if not m or not p.is_file():
                continue
            st = p.stat()
            entries.append(((m.group(1), int(m.group(2) or 0)), BackupEntry(
                name=p.name,
                path=str(p),
                size=st.st_size,
                modified_at=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
            )))
        entries.sort(key=lambda e: e[0])
        return [e[1] for e in entries]

    def is_writable(self) -> bool:
        probe = self.root
        while not probe.exists() and probe != probe.parent:
            probe = probe.parent
        return os.access(probe, os.W_OK)
