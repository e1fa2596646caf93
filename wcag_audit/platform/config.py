from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── App ─────────────────────────────────────
    APP_NAME: str = "WCAG Audit"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    DEBUG: bool = True

    # ── Database ────────────────────────────────
    DATABASE_URL: str = "sqlite+aiosqlite:///./wcag_audit.db"

    # ── Page fetching ───────────────────────────
    # Single attempt per analysis; this timeout is the only bound on a fetch
    FETCH_TIMEOUT_SECONDS: float = 15.0
    FETCH_USER_AGENT: str = "WCAGAudit/1.0 (+https://github.com/wcag-audit)"
    FETCH_FOLLOW_REDIRECTS: bool = True

    # ── Progress broadcasting ───────────────────
    BROADCAST_SEND_TIMEOUT_SECONDS: float = 5.0
    SSE_QUEUE_SIZE: int = 100

    # ── Listing ─────────────────────────────────
    DEFAULT_PAGE_LIMIT: int = 10
    MAX_PAGE_LIMIT: int = 100

    # ── HTTP ────────────────────────────────────
    FRONTEND_URL: str = "http://localhost:3001"
    ENABLE_TEST_FIXTURES: bool = True

    # ── Logging ─────────────────────────────────
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"

    SHUTDOWN_GRACE_SECONDS: float = 10.0

    class Config:
        env_file = str(Path(__file__).parent.parent.parent / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
