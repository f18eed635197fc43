# daily_planner/config.py

"""Settings loaded from environment variables (+ optional .env file).

PORT and HOST keep their conventional unprefixed names so the service can
be deployed to hosts that inject them; everything else uses the PLANNER_
prefix.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ENV_PREFIX = "PLANNER"

DEFAULT_PORT = 3000
DEFAULT_HOST = "0.0.0.0"
DEFAULT_TASKS_FILE = Path("data") / "tasks.json"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None or v.strip() == "" else v.strip()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Optional[Path]) -> Optional[Path]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw.strip()).expanduser()


def _log_level(raw: str) -> int:
    level = logging.getLevelName(raw.upper())
    return level if isinstance(level, int) else logging.INFO


@dataclass(frozen=True, slots=True)
class Settings:
    host: str
    port: int
    tasks_file: Path
    static_dir: Optional[Path]
    log_level: int
    log_file: Optional[Path]


def load_settings(*, dotenv: bool = True) -> Settings:
    if dotenv:
        load_dotenv(override=False)

    port = _env_int("PORT", DEFAULT_PORT)
    if not 0 < port < 65536:
        port = DEFAULT_PORT

    return Settings(
        host=_env("HOST", DEFAULT_HOST),
        port=port,
        tasks_file=_env_path(_k("TASKS_FILE"), DEFAULT_TASKS_FILE),
        static_dir=_env_path(_k("STATIC_DIR"), None),
        log_level=_log_level(_env(_k("LOG_LEVEL"), "INFO")),
        log_file=_env_path(_k("LOG_FILE"), None),
    )
