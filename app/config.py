import logging
import os
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ValidationError, field_validator

ENV_PREFIX = "JOURNEY_"

logger = logging.getLogger(__name__)


class Settings(BaseModel):
    goal_limit: int = 50
    task_limit: int = 200
    plan_max_tasks: int = 20
    log_level: str = "INFO"

    @field_validator("goal_limit", "task_limit", "plan_max_tasks")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level {value}")
        return level


_settings: Optional[Settings] = None


def _from_env(environ: Mapping[str, str]) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for field in Settings.model_fields:
        raw = environ.get(f"{ENV_PREFIX}{field.upper()}")
        if raw is not None and raw.strip():
            values[field] = raw.strip()
    return values


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    values = _from_env(os.environ if environ is None else environ)
    defaults = Settings().model_dump()
    for field, raw in values.items():
        try:
            Settings(**{**defaults, field: raw})
        except ValidationError:
            logger.warning("Ignoring invalid %s%s=%r", ENV_PREFIX, field.upper(), raw)
            continue
        defaults[field] = raw
    return Settings(**defaults)


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    global _settings
    _settings = None
