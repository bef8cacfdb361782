from __future__ import annotations

import os
import random
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

_ENV_PREFIX = "AGENT_READINESS_"

# Picked once per process unless AGENT_READINESS_USER_AGENT is set.
USER_AGENTS = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
)
_PROCESS_USER_AGENT = random.choice(USER_AGENTS)


def _env(name: str, default: str) -> str:
    return os.getenv(_ENV_PREFIX + name, default).strip() or default


@dataclass(frozen=True)
class Settings:
    user_agent: str = _PROCESS_USER_AGENT

    # Fetcher
    fetch_timeout: float = 12.0
    fetch_retries: int = 2
    retry_backoff: float = 0.5
    probe_timeout: float = 3.0

    # Frontier
    max_pages: int = 30
    batch_size: int = 5
    batch_delay: float = 0.3

    # Service
    cache_ttl_hours: float = 24.0
    max_reports: int = 1000
    cors_origins: tuple[str, ...] = ("*",)

    @classmethod
    def from_env(cls) -> Settings:
        raw_origins = os.getenv(_ENV_PREFIX + "CORS_ORIGINS", "").strip()
        origins = tuple(o.strip() for o in raw_origins.split(",") if o.strip()) or ("*",)
        return cls(
            user_agent=_env("USER_AGENT", _PROCESS_USER_AGENT),
            fetch_timeout=float(_env("FETCH_TIMEOUT", "12")),
            fetch_retries=max(0, int(_env("FETCH_RETRIES", "2"))),
            retry_backoff=float(_env("RETRY_BACKOFF", "0.5")),
            probe_timeout=float(_env("PROBE_TIMEOUT", "3")),
            max_pages=max(1, int(_env("MAX_PAGES", "30"))),
            batch_size=max(1, int(_env("BATCH_SIZE", "5"))),
            batch_delay=max(0.0, float(_env("BATCH_DELAY", "0.3"))),
            cache_ttl_hours=float(_env("CACHE_TTL_HOURS", "24")),
            max_reports=max(1, int(_env("MAX_REPORTS", "1000"))),
            cors_origins=origins,
        )


def load_settings(env_file: str | Path | None = None) -> Settings:
    """Read a .env file (without overriding the real environment) and build Settings."""
    if env_file is None:
        env_file = Path.cwd() / ".env"
    load_dotenv(env_file, override=False)
    return Settings.from_env()
