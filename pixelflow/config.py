"""
Configuration for Pixel Flow.

Settings are pydantic models with validated defaults. `get_settings()` builds
them once from the environment:

- PIXELFLOW_MIN_WORK_SIZE: elements below which the scheduler runs sequentially
- PIXELFLOW_WORKER_COUNT: worker threads of the default scheduler
- PIXELFLOW_LOG_LEVEL: level used by `configure_logging`
- PIXELFLOW_DEBUG: force DEBUG logging
"""

import logging
import os
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

from pixelflow.core.constants import ParallelConstants

ENV_PREFIX = "PIXELFLOW_"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")


class ParallelSettings(BaseModel):
    """Defaults of the process-wide scheduler."""

    min_work_size: int = Field(
        default=ParallelConstants.MIN_WORK_SIZE_DEFAULT,
        ge=ParallelConstants.MIN_WORK_SIZE_MIN,
        description="Minimum number of elements before work is split across threads",
    )
    worker_count: Optional[int] = Field(
        default=None,
        ge=1,
        description="Worker threads (None: hardware parallelism)",
    )


class SystemSettings(BaseModel):
    """Logging and debug configuration."""

    log_level: str = Field(default="INFO", description="Root log level")
    log_format: str = Field(default=LOG_FORMAT, description="Log record format")
    debug: bool = Field(default=False, description="Enable debug logging of filter internals")

    @field_validator("log_level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return level


class Settings(BaseModel):
    """Root settings object."""

    parallel: ParallelSettings = Field(default_factory=ParallelSettings)
    system: SystemSettings = Field(default_factory=SystemSettings)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build settings from environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        Validated Settings
    """
    environ = os.environ if environ is None else environ

    parallel: Dict[str, Any] = {}
    if environ.get(f"{ENV_PREFIX}MIN_WORK_SIZE"):
        parallel["min_work_size"] = environ[f"{ENV_PREFIX}MIN_WORK_SIZE"]
    if environ.get(f"{ENV_PREFIX}WORKER_COUNT"):
        parallel["worker_count"] = environ[f"{ENV_PREFIX}WORKER_COUNT"]

    system: Dict[str, Any] = {}
    if environ.get(f"{ENV_PREFIX}LOG_LEVEL"):
        system["log_level"] = environ[f"{ENV_PREFIX}LOG_LEVEL"]
    if environ.get(f"{ENV_PREFIX}DEBUG"):
        system["debug"] = environ[f"{ENV_PREFIX}DEBUG"]

    return Settings(
        parallel=ParallelSettings(**parallel),
        system=SystemSettings(**system),
    )


@lru_cache()
def get_settings() -> Settings:
    """Cached settings; call `get_settings.cache_clear()` to reload."""
    return load_settings()


def configure_logging(settings: Optional[Settings] = None) -> logging.Logger:
    """
    Configure root logging from settings.

    The library never calls this on import; applications and test runs opt in.
    """
    settings = settings or get_settings()
    level = logging.DEBUG if settings.system.debug else getattr(logging, settings.system.log_level)
    logging.basicConfig(level=level, format=settings.system.log_format)
    logger = logging.getLogger("pixelflow")
    logger.debug(f"Logging configured at {logging.getLevelName(level)}")
    return logger
