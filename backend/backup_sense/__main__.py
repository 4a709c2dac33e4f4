import argparse
import logging

import uvicorn

from .config import Settings
from .main import create_app

logger = logging.getLogger(__name__)


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Receive pfSense/OPNsense configuration backups over HTTP")
    parser.add_argument("-p", "--port", type=int, default=None, help="Listening port (default: $PORT or 80)")
    parser.add_argument("-m", "--max-mb", type=int, default=None, help="Maximum upload size in MB (default: $MAX_UPLOAD_MB or 10)")
    parser.add_argument("-d", "--backup-dir", default=None, help="Backup root directory (default: $BACKUP_DIR or ./backup)")
    args = parser.parse_args(argv)

    settings = Settings.from_env(port=args.port, max_upload_mb=args.max_mb, backup_dir=args.backup_dir)
    app = create_app(settings)
    logger.info("Backup server started on port %d...", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
