"""
config.py
Settings loaded from environment variables + logging setup.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_DB_FILE = Path(__file__).with_name("gym.db")

# date.weekday() numbering (Monday == 0)
WEEKDAYS = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    db_file: Path = DEFAULT_DB_FILE
    session_key: str = "user"
    first_weekday: int = WEEKDAYS["sunday"]
    session_goal: int = 12
    points_goal: int = 200
    leaderboard_size: int = 10
    bcrypt_rounds: int = 12
    log_level: str = "INFO"


def _int_env(name: str, default: int, minimum: int = 1, maximum: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}.") from None
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}.")
    if maximum is not None and value > maximum:
        raise ValueError(f"{name} must be <= {maximum}, got {value}.")
    return value


def load_settings() -> Settings:
    week_start = os.getenv("GYM_WEEK_START", "sunday").strip().lower()
    if week_start not in WEEKDAYS:
        raise ValueError(f"GYM_WEEK_START must be a weekday name, got {week_start!r}.")

    level = os.getenv("GYM_LOG_LEVEL", "INFO").strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"GYM_LOG_LEVEL is not a logging level: {level!r}.")

    db_file = os.getenv("GYM_DB_FILE")
    return Settings(
        db_file=Path(db_file) if db_file else DEFAULT_DB_FILE,
        session_key=os.getenv("GYM_SESSION_KEY", "user"),
        first_weekday=WEEKDAYS[week_start],
        session_goal=_int_env("GYM_SESSION_GOAL", 12),
        points_goal=_int_env("GYM_POINTS_GOAL", 200),
        leaderboard_size=_int_env("GYM_LEADERBOARD_SIZE", 10),
        # bcrypt accepts 4..31
        bcrypt_rounds=_int_env("GYM_BCRYPT_ROUNDS", 12, minimum=4, maximum=31),
        log_level=level,
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
