"""
Session settings.

Values come from defaults, then the environment (a .env file is honoured through python-dotenv), then the
command line. Settings are validated with pydantic so a bad EXPRCALC_* value fails loudly at start-up.
"""

import logging
import os
from typing import Any, Dict, Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "EXPRCALC_"

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseModel):
    """Model for calculator session settings."""
    prompt: str = "> "
    history_file: str = Field(default_factory=lambda: os.path.expanduser("~/.exprcalc_history"))
    precision: int = Field(12, ge=1, le=17, description="Significant digits shown for non-integral results")
    log_level: str = "WARNING"
    show_tokens: bool = False

    @field_validator('log_level')
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator('history_file')
    @classmethod
    def expand_history_path(cls, v: str) -> str:
        return os.path.expanduser(v.strip())


def load_settings(overrides: Optional[Dict[str, Any]] = None) -> Settings:
    """
    Build Settings from EXPRCALC_* environment variables and explicit overrides.

    Args:
        overrides: Values that win over the environment; None entries are ignored.

    Raises:
        pydantic.ValidationError: If any value fails validation.
    """
    load_dotenv(find_dotenv(usecwd=True))
    values: Dict[str, Any] = {}
    for field in Settings.model_fields:
        raw = os.getenv(ENV_PREFIX + field.upper())
        if raw is not None:
            values[field] = raw
    for key, value in (overrides or {}).items():
        if value is not None:
            values[key] = value
    return Settings(**values)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=getattr(logging, settings.log_level), format=_LOG_FORMAT)
