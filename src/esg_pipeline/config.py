"""Configuration helpers and Settings container.

This module provides a small `Settings` dataclass and `get_settings` which
reads the pipeline's environment variables (from the process environment or a
project `.env` file).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Explicitly load .env from project root
PROJECT_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(PROJECT_ROOT / ".env")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class Settings:
    """Container for pipeline configuration read from the environment.

    Attributes:
        fail_fast: Abort the run on the first bad asset instead of skipping it.
        parallel: Transform assets concurrently with dask.
        log_level: Numeric logging level.
        log_path: File that receives a copy of the log, None to disable.
    """
    fail_fast: bool
    parallel: bool
    log_level: int
    log_path: Path | None


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise RuntimeError(f"{name} must be a boolean (true/false), got {raw!r}")


def get_settings() -> Settings:
    """Read environment variables and return a frozen `Settings` object.

    Raises:
        RuntimeError: if a boolean flag or `ESG_LOG_LEVEL` holds an unknown value.
    """
    level_name = os.getenv("ESG_LOG_LEVEL", "INFO").strip().upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise RuntimeError(f"ESG_LOG_LEVEL must be a logging level name, got {level_name!r}")

    log_path_raw = os.getenv("ESG_LOG_PATH", "logs/esg_pipeline.log").strip()

    return Settings(
        fail_fast=_env_bool("ESG_FAIL_FAST", False),
        parallel=_env_bool("ESG_PARALLEL", False),
        log_level=level,
        log_path=Path(log_path_raw) if log_path_raw else None,
    )
