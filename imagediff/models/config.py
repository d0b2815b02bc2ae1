"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_DOCKER_CONFIG_PATH = "~/.docker/config.json"
DEFAULT_SSH_PRIVATE_KEY_PATH = "~/.ssh/id_rsa"
DEFAULT_DOCKER_HOST = "unix:///var/run/docker.sock"


@dataclass(frozen=True)
class GitOptions:
    """How to reach the source repository."""

    ssh_private_key_path: str = ""
    # Skip the anonymous HTTPS attempt for repositories only reachable via SSH.
    ssh_only: bool = False


@dataclass(frozen=True)
class Options:
    """Operator-supplied paths handed to the collaborators of a diff run."""

    docker_config_path: str = ""
    git: GitOptions = field(default_factory=GitOptions)


@dataclass(frozen=True)
class DockerConfig:
    """Docker Engine API connection."""

    host: str = DEFAULT_DOCKER_HOST
    timeout_seconds: float = 300.0


@dataclass(frozen=True)
class LogConfig:
    """Logging configuration."""

    level: str = "info"
    format: str = "console"


@dataclass(frozen=True)
class ImageDiffConfig:
    """Top-level imagediff configuration."""

    docker: DockerConfig = field(default_factory=DockerConfig)
    log: LogConfig = field(default_factory=LogConfig)
    options: Options = field(default_factory=Options)
