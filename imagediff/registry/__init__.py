"""Container registry collaborators for imagediff.

Exports:
    DockerClient        -- Docker Engine API client (list, pull, inspect).
    ImagePuller         -- pulls an image unless it is cached locally,
                           retrying once with credentials on an auth failure.
    CredentialResolver  -- config.json lookup with interactive fallback.
    AuthConfig          -- credentials for one registry.
"""

from imagediff.registry.credentials import (
    AuthConfig,
    CredentialResolver,
    encode_auth_config,
    read_auth_config,
    read_auth_configs,
)
from imagediff.registry.docker import DockerClient, ImagePuller

__all__ = [
    "AuthConfig",
    "CredentialResolver",
    "DockerClient",
    "ImagePuller",
    "encode_auth_config",
    "read_auth_config",
    "read_auth_configs",
]
