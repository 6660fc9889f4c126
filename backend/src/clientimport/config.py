"""Configuration module for the client import gate."""

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

# --- minimal .env loader (stdlib only) ---
def _load_dotenv():
    p = Path(".env")
    if not p.exists():
        return
    try:
        for line in p.read_text(encoding="utf-8").splitlines():
            s = line.strip()
            if not s or s.startswith("#") or "=" not in s:
                continue
            k, v = s.split("=", 1)
            k = k.strip()
            v = v.strip()
            # keep existing OS env if already set
            if k and (k not in os.environ):
                os.environ[k] = v
    except OSError:
        # fail open: env loading is best-effort
        pass

_load_dotenv()


# Validation defaults
SAMPLE_SIZE_DEFAULT = 10
PREVIEW_LIMIT_DEFAULT = 8
MAX_UPLOAD_BYTES_DEFAULT = 5 * 1024 * 1024  # 5MB

# Upstream defaults
CLIENTIMPORT_API_BASE_URL = os.getenv("CLIENTIMPORT_API_BASE_URL", "http://localhost:8080/api")
CLIENTIMPORT_IMPORT_PATH = os.getenv("CLIENTIMPORT_IMPORT_PATH", "/admins/clients/import")
CLIENTIMPORT_CORS_ORIGINS = os.getenv("CLIENTIMPORT_CORS_ORIGINS", "")  # e.g. "http://localhost:5173" or "*"

PriceHintMode = Literal["warn", "error", "off"]


class Settings(BaseModel):
    """Application settings."""

    api_base_url: str = Field(
        default=CLIENTIMPORT_API_BASE_URL,
        description="Base URL of the upstream admin API"
    )
    import_path: str = Field(
        default=CLIENTIMPORT_IMPORT_PATH,
        description="Path of the bulk client import endpoint"
    )
    api_token: str = Field(
        default="",
        description="Bearer token sent with uploads (empty means no auth header)"
    )
    upload_timeout_s: float = Field(default=30.0, gt=0)
    sample_size: int = Field(default=SAMPLE_SIZE_DEFAULT, ge=1)
    preview_limit: int = Field(default=PREVIEW_LIMIT_DEFAULT, ge=1)
    price_hint: PriceHintMode = Field(
        default="warn",
        description="How to report a header without a 'price' column"
    )
    max_upload_bytes: int = Field(default=MAX_UPLOAD_BYTES_DEFAULT, gt=0)

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables."""
        price_hint = os.getenv("CLIENTIMPORT_PRICE_HINT", "warn").strip().lower()
        if price_hint not in ("warn", "error", "off"):
            price_hint = "warn"
        return cls(
            api_base_url=os.getenv("CLIENTIMPORT_API_BASE_URL", CLIENTIMPORT_API_BASE_URL),
            import_path=os.getenv("CLIENTIMPORT_IMPORT_PATH", CLIENTIMPORT_IMPORT_PATH),
            api_token=os.getenv("CLIENTIMPORT_API_TOKEN", ""),
            upload_timeout_s=float(os.getenv("CLIENTIMPORT_UPLOAD_TIMEOUT_S", "30")),
            sample_size=int(os.getenv("CLIENTIMPORT_SAMPLE_SIZE", str(SAMPLE_SIZE_DEFAULT))),
            preview_limit=int(os.getenv("CLIENTIMPORT_PREVIEW_LIMIT", str(PREVIEW_LIMIT_DEFAULT))),
            price_hint=price_hint,
            max_upload_bytes=int(os.getenv("CLIENTIMPORT_MAX_UPLOAD_BYTES", str(MAX_UPLOAD_BYTES_DEFAULT))),
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()
