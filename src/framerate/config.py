from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

ROOT = Path(__file__).resolve().parents[2]
DEFAULT_DB_PATH = ROOT / "data" / "framerate.db"
DEFAULT_MAX_PRODUCTS_PER_ANALYSIS = 20

LOG_FORMAT = "[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


class Settings(BaseModel):
    db_path: Path = DEFAULT_DB_PATH
    max_products_per_analysis: int = DEFAULT_MAX_PRODUCTS_PER_ANALYSIS
    log_level: str = "INFO"


def load_settings(env_file: Path | None = None) -> Settings:
    """Read settings from the environment, after loading ``.env`` if present."""
    load_dotenv(env_file or ROOT / ".env")
    db_path = os.getenv("FRAMERATE_DB_PATH", "").strip()
    return Settings(
        db_path=Path(db_path) if db_path else DEFAULT_DB_PATH,
        max_products_per_analysis=_env_int(
            "FRAMERATE_MAX_PRODUCTS_PER_ANALYSIS", DEFAULT_MAX_PRODUCTS_PER_ANALYSIS
        ),
        log_level=os.getenv("FRAMERATE_LOG_LEVEL", "INFO").strip().upper() or "INFO",
    )


def configure_logging(level: str | int = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
