"""Core data structures for imagediff."""

from imagediff.models.changes import Change
from imagediff.models.config import (
    DockerConfig,
    GitOptions,
    ImageDiffConfig,
    LogConfig,
    Options,
)

__all__ = [
    "Change",
    "DockerConfig",
    "GitOptions",
    "ImageDiffConfig",
    "LogConfig",
    "Options",
]
