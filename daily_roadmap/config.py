"""Runtime configuration loaded from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from daily_roadmap.const import (
    DEFAULT_DATABASE_PATH,
    DEFAULT_OWNER,
    DEFAULT_START_MINUTES,
    DEFAULT_WEEK_DAYS,
    MAX_START_MINUTES,
)

ENV_DATABASE = "DAILY_ROADMAP_DB"
ENV_OWNER = "DAILY_ROADMAP_OWNER"
ENV_WEEK_DAYS = "DAILY_ROADMAP_WEEK_DAYS"
ENV_START_MINUTES = "DAILY_ROADMAP_START_MINUTES"


@dataclass(frozen=True)
class RoadmapConfig:
    database_path: str = DEFAULT_DATABASE_PATH
    owner: str = DEFAULT_OWNER
    week_days: int = DEFAULT_WEEK_DAYS
    default_start_minutes: int = DEFAULT_START_MINUTES


def _int_from_env(env: Mapping[str, str], name: str, default: int, low: int, high: Optional[int] = None) -> int:
    raw = env.get(name, "")
    try:
        value = int(raw) if raw else default
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got '{raw}'") from exc
    if value < low or (high is not None and value > high):
        bounds = f"at least {low}" if high is None else f"between {low} and {high}"
        raise ValueError(f"{name} must be {bounds}, got {value}")
    return value


def load_config(environ: Optional[Mapping[str, str]] = None, **overrides) -> RoadmapConfig:
    """Build a config from environment variables, then explicit overrides."""

    env = os.environ if environ is None else environ

    values = {
        "database_path": env.get(ENV_DATABASE) or DEFAULT_DATABASE_PATH,
        "owner": env.get(ENV_OWNER) or DEFAULT_OWNER,
        "week_days": _int_from_env(env, ENV_WEEK_DAYS, DEFAULT_WEEK_DAYS, 1),
        "default_start_minutes": _int_from_env(
            env, ENV_START_MINUTES, DEFAULT_START_MINUTES, 0, MAX_START_MINUTES
        ),
    }
    values.update({key: value for key, value in overrides.items() if value is not None})
    return RoadmapConfig(**values)
