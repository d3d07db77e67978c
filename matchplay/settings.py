import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_TOURNAMENT_CONFIG = PACKAGE_DIR / "data" / "tournament.json"
DEFAULT_STROKE_DIVISOR = 3
DEFAULT_STROKE_CAP = 6


@dataclass(frozen=True)
class Settings:
    database_url: str
    tournament_config: Path
    point_scale: Optional[str] = None
    stroke_divisor: int = DEFAULT_STROKE_DIVISOR
    stroke_cap: int = DEFAULT_STROKE_CAP
    golf_api_key: str = ""
    log_level: str = "INFO"
    app_host: str = "0.0.0.0"
    app_port: int = 8000


def _normalize_database_url(value: Optional[str]) -> str:
    if not value:
        return f"sqlite:///{PACKAGE_DIR / 'DATA' / 'matchplay.db'}"
    normalized = value.strip()
    if normalized.startswith("sqlite://"):
        return normalized
    if Path(normalized).suffix:  # treat as direct path
        return f"sqlite:///{normalized}"
    return normalized


def _int_from_env(key: str, default: int) -> int:
    value = os.getenv(key)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning("Ignoring %s=%s (not an integer)", key, value)
        return default


def load_settings() -> Settings:
    database_url = _normalize_database_url(os.getenv("DATABASE_URL"))
    config_path = os.getenv("TOURNAMENT_CONFIG")
    return Settings(
        database_url=database_url,
        tournament_config=Path(config_path) if config_path else DEFAULT_TOURNAMENT_CONFIG,
        point_scale=os.getenv("POINT_SCALE") or None,
        stroke_divisor=_int_from_env("STROKE_DIVISOR", DEFAULT_STROKE_DIVISOR),
        stroke_cap=_int_from_env("STROKE_CAP", DEFAULT_STROKE_CAP),
        golf_api_key=os.getenv("GOLF_API_KEY", ""),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        app_host=os.getenv("APP_HOST", "0.0.0.0"),
        app_port=_int_from_env("APP_PORT", _int_from_env("PORT", 8000)),
    )
