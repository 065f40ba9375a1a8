"""
Configuration for Clarity Academy.

Settings come from environment variables, with a `.env` file in the
project root loaded first:

- CLARITY_DB_PATH: SQLite document store (default: data/clarity.db)
- CLARITY_COURSES_DIR: course definition files (default: data/courses)
- CLARITY_WRITE_POLICY: "confirmed" or "optimistic" (default: confirmed)
- CLARITY_LOG_LEVEL: logging level name (default: INFO)
- CLARITY_USER_ID: learner id used when no user is signed in
"""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

PROJECT_ROOT = Path(__file__).parent.parent
DEFAULT_DB_PATH = Path("data/clarity.db")
DEFAULT_COURSES_DIR = Path("data/courses")
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


class WritePolicy(str, Enum):
    """When the in-memory progress copy changes relative to the store write."""
    CONFIRMED = "confirmed"     # persist, then mutate
    OPTIMISTIC = "optimistic"   # mutate, then persist


class Settings(BaseModel):
    db_path: Path = DEFAULT_DB_PATH
    courses_dir: Path = DEFAULT_COURSES_DIR
    write_policy: WritePolicy = WritePolicy.CONFIRMED
    log_level: str = "INFO"
    user_id: Optional[str] = None

    @field_validator("log_level")
    @classmethod
    def log_level_known(cls, v):
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("write_policy", mode="before")
    @classmethod
    def write_policy_lower(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("user_id")
    @classmethod
    def user_id_blank(cls, v):
        if v is None:
            return None
        return v.strip() or None


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """
    Load settings from the environment.

    Args:
        env_file: Optional .env file (default: PROJECT_ROOT/.env)
    """
    load_dotenv(env_file or PROJECT_ROOT / ".env")

    values = {}
    for field, env_name in (
        ("db_path", "CLARITY_DB_PATH"),
        ("courses_dir", "CLARITY_COURSES_DIR"),
        ("write_policy", "CLARITY_WRITE_POLICY"),
        ("log_level", "CLARITY_LOG_LEVEL"),
        ("user_id", "CLARITY_USER_ID"),
    ):
        value = os.environ.get(env_name)
        if value is not None:
            values[field] = value
    return Settings(**values)


def configure_logging(level: str = "INFO"):
    """Set up root logging for app and scripts."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
