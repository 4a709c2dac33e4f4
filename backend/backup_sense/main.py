import logging
from typing import Optional
from fastapi import FastAPI

from .config import Settings
from .services.intake import IntakePipeline
from .services.store import BackupStore
from .api import upload, backups

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)

    app = FastAPI(title="backup-sense", version="0.1.0")
    app.state.settings = settings
    app.state.store = BackupStore(settings.backup_dir)
    app.state.pipeline = IntakePipeline(app.state.store, settings.max_upload_bytes)

    @app.get("/health")
    def health():
        return {"status": "ok", "backup_dir_writable": app.state.store.is_writable()}

    app.include_router(upload.router)
    app.include_router(backups.router)

    logger.info("Backup root: %s", app.state.store.root)
    logger.info("Max upload size: %d MB (%d bytes)", settings.max_upload_mb, settings.max_upload_bytes)
    return app
