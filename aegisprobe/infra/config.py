from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from aegisprobe.core.errors import ConfigError

ENV_PREFIX = "AEGISPROBE_"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class AnalysisSettings:
    tool_timeout: float = 8.0
    min_string_length: int = 4
    high_entropy_threshold: float = 4.5
    cache_ttl: float = 3600.0
    cache_max_entries: int = 256
    readelf: str = "readelf"
    objdump: str = "objdump"
    log_level: str = "INFO"

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level)


def _positive_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(ENV_PREFIX + key)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{ENV_PREFIX}{key} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{ENV_PREFIX}{key} must be positive, got {raw!r}")
    return value


def _positive_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(ENV_PREFIX + key)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw, 10)
    except ValueError as exc:
        raise ConfigError(f"{ENV_PREFIX}{key} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{ENV_PREFIX}{key} must be positive, got {raw!r}")
    return value


def load_settings(env: Optional[Mapping[str, str]] = None, dotenv_path: Optional[str] = None) -> AnalysisSettings:
    """Build settings from ``AEGISPROBE_*`` variables.

    When ``env`` is omitted the process environment is used, after merging a
    ``.env`` file (existing variables win).
    """
    if env is None:
        load_dotenv(dotenv_path=dotenv_path)
        env = os.environ
    log_level = env.get(ENV_PREFIX + "LOG_LEVEL", "INFO").upper()
    if log_level not in LOG_LEVELS:
        raise ConfigError(f"{ENV_PREFIX}LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}")
    return AnalysisSettings(
        tool_timeout=_positive_float(env, "TOOL_TIMEOUT", 8.0),
        min_string_length=_positive_int(env, "MIN_STRING_LENGTH", 4),
        high_entropy_threshold=_positive_float(env, "HIGH_ENTROPY_THRESHOLD", 4.5),
        cache_ttl=_positive_float(env, "CACHE_TTL", 3600.0),
        cache_max_entries=_positive_int(env, "CACHE_MAX_ENTRIES", 256),
        readelf=env.get(ENV_PREFIX + "READELF") or "readelf",
        objdump=env.get(ENV_PREFIX + "OBJDUMP") or "objdump",
        log_level=log_level,
    )
