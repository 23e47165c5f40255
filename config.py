"""Marketplace admin application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


@dataclass
class MarketConfig:
    """Settings for the admin and storefront web application."""

    secret_key: str
    database_url: str
    jwt_secret: str
    jwt_expire_minutes: int
    public_base_url: str
    log_level: str
    max_upload_mb: int
    project_root: Path
    telegram_bot_token: Optional[str] = None

    @property
    def static_dir(self) -> Path:
        return self.project_root / "static"

    @property
    def storage_dir(self) -> Path:
        # storage bucket root, served under /static/uploads
        return self.static_dir / "uploads"

    @property
    def data_dir(self) -> Path:
        return self.project_root / "data"

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    def public_url(self, relative_path: str) -> str:
        base = self.public_base_url.rstrip("/")
        return f"{base}/{relative_path.lstrip('/')}"

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> "MarketConfig":
        """Build settings from environment variables and make sure directories exist."""

        root = project_root or Path(__file__).resolve().parent
        load_dotenv(root / ".env")

        config = cls(
            secret_key=os.environ.get("MARKET_SECRET_KEY", "market-admin-dev"),
            database_url=os.environ.get("DATABASE_URL", f"sqlite:///{root / 'data' / 'market.db'}"),
            jwt_secret=os.environ.get("JWT_SECRET", "dev-secret-change-me"),
            jwt_expire_minutes=_int_env("JWT_EXPIRE_MIN", 1440),
            public_base_url=os.environ.get("PUBLIC_BASE_URL", "http://127.0.0.1:5000"),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
            max_upload_mb=_int_env("MAX_UPLOAD_MB", 5),
            project_root=root,
            telegram_bot_token=os.environ.get("TELEGRAM_BOT_TOKEN") or None,
        )

        config.storage_dir.mkdir(parents=True, exist_ok=True)
        config.data_dir.mkdir(parents=True, exist_ok=True)
        return config


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name, str(default))
    try:
        return int(raw)
    except ValueError:
        return default
