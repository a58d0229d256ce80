"""
Central configuration via pydantic-settings.
All secrets are read from environment variables / .env file.
"""
from __future__ import annotations

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

# Institutional domains accepted in addition to generic addresses
DEFAULT_ACADEMIC_DOMAINS = (
    "du.ac.in,ipu.ac.in,ignou.ac.in,jnu.ac.in,iitd.ac.in,nsut.ac.in,dtu.ac.in,"
    "igdtuw.ac.in,aud.ac.in,jamiahamdard.edu,bhu.ac.in,bvpindia.com,mait.ac.in,"
    "ip.edu,msit.in,gbpuat.ac.in"
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Database ──────────────────────────────────────────────────────────────
    DATABASE_URL: str = "sqlite+aiosqlite:///./techelons.db"

    @property
    def async_database_url(self) -> str:
        """
        Hosting providers inject DATABASE_URL as 'postgresql://...'
        SQLAlchemy async requires 'postgresql+asyncpg://...'
        This property fixes the prefix automatically.
        """
        url = self.DATABASE_URL
        if url.startswith("postgresql://") or url.startswith("postgres://"):
            return "postgresql+asyncpg://" + url.split("://", 1)[1]
        return url

    # ── Admin ─────────────────────────────────────────────────────────────────
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str

    # ── Email (SMTP) ──────────────────────────────────────────────────────────
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 465
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_USE_TLS: bool = True
    EMAIL_FROM_NAME: str = "Techelons"

    @property
    def smtp_enabled(self) -> bool:
        return bool(self.SMTP_USER and self.SMTP_PASSWORD)

    # ── Validation ────────────────────────────────────────────────────────────
    # Raw comma-separated domain list, e.g. "du.ac.in,ipu.ac.in"
    ACADEMIC_EMAIL_DOMAINS: str = DEFAULT_ACADEMIC_DOMAINS

    @property
    def academic_domains_list(self) -> list[str]:
        """Parse ACADEMIC_EMAIL_DOMAINS env var to a list of lower-case domains."""
        return [
            d.strip().lower()
            for d in self.ACADEMIC_EMAIL_DOMAINS.split(",")
            if d.strip()
        ]

    # ── Caching / throttling ──────────────────────────────────────────────────
    CONTENT_CACHE_TTL: float = 300.0
    RATE_LIMIT_REQUESTS: int = 20
    RATE_LIMIT_PERIOD: float = 60.0

    LOG_LEVEL: str = "INFO"


settings = Settings()
