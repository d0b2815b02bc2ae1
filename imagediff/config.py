"""Configuration loading from environment variables."""

from __future__ import annotations

import os

from imagediff.models.config import (
    DEFAULT_DOCKER_CONFIG_PATH,
    DEFAULT_DOCKER_HOST,
    DEFAULT_SSH_PRIVATE_KEY_PATH,
    DockerConfig,
    GitOptions,
    ImageDiffConfig,
    LogConfig,
    Options,
)
from imagediff.observability.logging import LOG_FORMATS


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"IMAGEDIFF_{key}", default)


def _env_bool(key: str, default: bool = False) -> bool:
    val = _env(key, str(default).lower())
    return val.lower() in ("true", "1", "yes")


def _env_float(key: str, default: float, min_val: float | None = None) -> float:
    val = float(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    return val


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def _validate_log_format(value: str) -> str:
    if value.lower() not in LOG_FORMATS:
        raise ValueError(f"Invalid log format: {value}. Must be one of {LOG_FORMATS}")
    return value.lower()


def load_config() -> ImageDiffConfig:
    """Load configuration from IMAGEDIFF_* environment variables.

    ``DOCKER_HOST`` is honoured when ``IMAGEDIFF_DOCKER_HOST`` is unset, the
    same way the docker CLI picks its daemon.
    """
    return ImageDiffConfig(
        docker=DockerConfig(
            host=_env("DOCKER_HOST", os.environ.get("DOCKER_HOST", DEFAULT_DOCKER_HOST)),
            timeout_seconds=_env_float("DOCKER_TIMEOUT", 300.0, min_val=1.0),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
            format=_validate_log_format(_env("LOG_FORMAT", "console")),
        ),
        options=Options(
            docker_config_path=_env("DOCKER_CONFIG_PATH", DEFAULT_DOCKER_CONFIG_PATH),
            git=GitOptions(
                ssh_private_key_path=_env("SSH_PRIVATE_KEY_PATH", DEFAULT_SSH_PRIVATE_KEY_PATH),
                ssh_only=_env_bool("SSH_ONLY", False),
            ),
        ),
    )
