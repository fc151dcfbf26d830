# series_api/config.py
from __future__ import annotations

import os
from typing import List

from dotenv import load_dotenv

# .env in the working directory, if any; real environment variables win
load_dotenv()

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
PLACEHOLDER_KEYS = {"DUMMY_KEY", "PASTE_YOUR_KEY_HERE", "changeme"}


def _env(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def _env_int(name: str, default: int) -> int:
    value = _env(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_flag(name: str, default: bool = False) -> bool:
    value = _env(name).lower()
    if not value:
        return default
    return value in ("1", "true", "yes", "on")


# -------------------------
# CricketData (CricAPI) upstream
# -------------------------
CRICKETDATA_API_KEY: str = _env("CRICKETDATA_API_KEY")
CRICKETDATA_BASE_URL: str = _env("CRICKETDATA_BASE_URL", "https://api.cricapi.com/v1")

# Off by default: every upstream call then fails fast and resolution falls
# back to cached or synthetic data.
CRICKETDATA_ENABLED: bool = _env_flag("CRICKETDATA_ENABLED")

# Per-request ceiling; a timeout counts as a fetch failure
CRICKETDATA_TIMEOUT_SECONDS: int = _env_int("CRICKETDATA_TIMEOUT_SECONDS", 12)


# -------------------------
# Session cache
# -------------------------
SERIES_CACHE_TTL_SECONDS: int = _env_int("SERIES_CACHE_TTL_SECONDS", 30 * 60)

# Long-lived so a failed refresh can still serve the last good table
STANDINGS_CACHE_TTL_SECONDS: int = _env_int("STANDINGS_CACHE_TTL_SECONDS", 24 * 3600)


# -------------------------
# Logging
# -------------------------
LOG_LEVEL: str = _env("LOG_LEVEL", "INFO").upper()


def config_problems() -> List[str]:
    problems: List[str] = []

    if not CRICKETDATA_BASE_URL.startswith(("http://", "https://")):
        problems.append(f"CRICKETDATA_BASE_URL is not an http(s) URL: {CRICKETDATA_BASE_URL!r}")

    if CRICKETDATA_ENABLED and (not CRICKETDATA_API_KEY or CRICKETDATA_API_KEY in PLACEHOLDER_KEYS):
        problems.append("CRICKETDATA_ENABLED is on but CRICKETDATA_API_KEY is missing or a placeholder")

    for name, value in (
        ("CRICKETDATA_TIMEOUT_SECONDS", CRICKETDATA_TIMEOUT_SECONDS),
        ("SERIES_CACHE_TTL_SECONDS", SERIES_CACHE_TTL_SECONDS),
        ("STANDINGS_CACHE_TTL_SECONDS", STANDINGS_CACHE_TTL_SECONDS),
    ):
        if value <= 0:
            problems.append(f"{name} must be positive, got {value}")

    if LOG_LEVEL not in LOG_LEVELS:
        problems.append(f"LOG_LEVEL must be one of {sorted(LOG_LEVELS)}, got {LOG_LEVEL!r}")

    return problems


def validate_config() -> None:
    problems = config_problems()
    if problems:
        raise RuntimeError("Invalid configuration: " + "; ".join(problems))
