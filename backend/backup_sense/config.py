from __future__ import annotations
import os
from pathlib import Path
from pydantic import BaseModel, Field
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseModel):
    backup_dir: Path = Path("./backup")
    host: str = "0.0.0.0"
    port: int = Field(80, gt=0, lt=65536)
    max_upload_mb: int = Field(10, gt=0)
    log_level: str = "INFO"

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb << 20

    @classmethod
    def from_env(cls, **overrides) -> "Settings":
        values = {
            "backup_dir": os.getenv("BACKUP_DIR", "./backup"),
            "host": os.getenv("HOST", "0.0.0.0"),
            "port": os.getenv("PORT", "80"),
            "max_upload_mb": os.getenv("MAX_UPLOAD_MB", "10"),
            "log_level": os.getenv("LOG_LEVEL", "INFO").upper(),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
