from __future__ import annotations

import os
from dataclasses import dataclass


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    api_base_url: str
    api_path: str
    sticky_bypass: bool
    log_level: str


def load_settings() -> Settings:
    """Read settings from the environment. Call `load_dotenv()` first to honour a .env file."""
    return Settings(
        api_base_url=os.getenv("TRIVIA_API_BASE_URL", "http://localhost:3000"),
        api_path=os.getenv("TRIVIA_API_PATH", "/api/trivia"),
        sticky_bypass=_env_flag("TRIVIA_STICKY_BYPASS", "true"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
