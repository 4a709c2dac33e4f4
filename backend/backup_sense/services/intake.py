from __future__ import annotations
import logging
from typing import Optional

from ..schemas.backup import UploadOutcome
from .dialect import detect_dialect, extract_config
from .errors import IntakeError
from .sizeguard import check_size
from .store import BackupStore

logger = logging.getLogger(__name__)


class IntakePipeline:
    """Size check -> dialect detection -> extraction -> storage.

    One attempt per upload, no retries. A failed step stops the run and no
    file is written; a host directory created earlier is left in place.
    """

    def __init__(self, store: BackupStore, max_bytes: int) -> None:
        self.store = store
        self.max_bytes = max_bytes

    def check_declared(self, declared_size: Optional[int]) -> None:
        check_size(declared_size, self.max_bytes)

    def submit(self, payload: bytes, client: str, declared_size: Optional[int] = None) -> UploadOutcome:
        try:
            check_size(declared_size, self.max_bytes)
            check_size(len(payload), self.max_bytes)
            dialect = detect_dialect(payload)
            config = extract_config(payload, dialect)
            hostname = config.canonical_hostname
            record = self.store.save(hostname, payload)
        except IntakeError as e:
            return self.failure(client, e)

        logger.info("Backup received from %s (%s %s) saved to %s", client, dialect.value, hostname, record.path)
        return UploadOutcome(
            ok=True,
            client=client,
            hostname=hostname,
            dialect=dialect,
            path=record.path,
            sha256=record.sha256,
        )

    def failure(self, client: str, err: IntakeError) -> UploadOutcome:
        cause = err.__cause__
        level = logging.ERROR if err.status >= 500 else logging.WARNING
        logger.log(level, "%s from %s: %s%s", err.kind, client, err.message,
                   f" (cause: {cause!r})" if cause else "")
        return UploadOutcome(ok=False, client=client, kind=err.kind, detail=err.message, status=err.status)
