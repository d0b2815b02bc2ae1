"""Registry credentials: Docker ``config.json`` reading and interactive fallback.

The Docker CLI stores registry credentials as::

    {
        "auths": {
            "https://index.docker.io/v1/": {"auth": "<base64 user:password>"},
            "quay.io": {"username": "...", "password": "..."}
        }
    }

The Docker Engine API expects them as URL-safe base64 JSON in the
``X-Registry-Auth`` header; ``encode_auth_config`` produces that form.
"""

from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Callable
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any

import click

from imagediff.errors import CredentialsError
from imagediff.image.reference import DOCKER_HUB, ImageReference
from imagediff.models.config import DEFAULT_DOCKER_CONFIG_PATH
from imagediff.observability.logging import get_logger

_log = get_logger("registry.credentials")

_DOCKER_HUB_KEYS = ("index.docker.io", "registry-1.docker.io")

# config.json key -> AuthConfig field
_JSON_FIELDS = {
    "username": "username",
    "password": "password",
    "auth": "auth",
    "email": "email",
    "serveraddress": "server_address",
    "identitytoken": "identity_token",
    "registrytoken": "registry_token",
}


@dataclass(frozen=True)
class AuthConfig:
    """Credentials for one registry."""

    username: str = ""
    password: str = ""
    auth: str = ""
    email: str = ""
    server_address: str = ""
    identity_token: str = ""
    registry_token: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuthConfig:
        values = {
            attr: str(data[key])
            for key, attr in _JSON_FIELDS.items()
            if data.get(key)
        }
        return cls(**values)

    def resolved(self) -> AuthConfig:
        """Fill username/password from the base64 ``auth`` field when absent.

        Raises:
            CredentialsError: ``auth`` is not base64 of ``user:password``.
        """
        if self.username or not self.auth:
            return self
        try:
            decoded = base64.b64decode(self.auth, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise CredentialsError(f"invalid auth field for {self.server_address or 'registry'}") from exc
        username, sep, password = decoded.partition(":")
        if not sep:
            raise CredentialsError(f"auth field for {self.server_address or 'registry'} has no password")
        return replace(self, username=username, password=password)

    def to_dict(self) -> dict[str, str]:
        """Serialise to the Docker Engine JSON keys, omitting empty fields."""
        values = asdict(self)
        return {key: values[attr] for key, attr in _JSON_FIELDS.items() if values[attr]}


def read_auth_configs(docker_config_path: str) -> dict[str, AuthConfig]:
    """Read and deserialise a Docker config.json, returning its ``auths`` map.

    Raises:
        CredentialsError: the file cannot be read or is not valid JSON.
    """
    path = Path(docker_config_path).expanduser()
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise CredentialsError(f"cannot read Docker config {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise CredentialsError(f"invalid Docker config {path}: {exc}") from exc
    auths = document.get("auths") if isinstance(document, dict) else None
    if not isinstance(auths, dict):
        return {}
    return {
        registry: AuthConfig.from_dict(entry)
        for registry, entry in auths.items()
        if isinstance(entry, dict)
    }


def read_auth_config(docker_config_path: str, registry: str) -> AuthConfig:
    """Read a Docker config.json and return the entry for *registry*.

    Keys are compared by hostname, so ``https://quay.io`` matches ``quay.io``
    and ``https://index.docker.io/v1/`` matches ``docker.io``.

    Raises:
        CredentialsError: no entry for *registry*, or the file is unusable.
    """
    configs = read_auth_configs(docker_config_path)
    if registry in configs:
        return configs[registry]
    wanted = _hostname(registry)
    for key, config in configs.items():
        if _hostname(key) == wanted:
            return config
    raise CredentialsError("not found")


def encode_auth_config(config: AuthConfig) -> str:
    """Encode *config* for the ``X-Registry-Auth`` header."""
    payload = json.dumps(config.resolved().to_dict()).encode("utf-8")
    return base64.urlsafe_b64encode(payload).decode("ascii")


def prompt_for_credentials(registry: str) -> AuthConfig:
    """Ask the operator for a username and password on the terminal."""
    username = click.prompt(f"Enter your username for {registry}", err=True)
    password = click.prompt("Enter your password", hide_input=True, err=True)
    return AuthConfig(
        username=username.strip(),
        password=password,
        server_address=registry,
    )


class CredentialResolver:
    """Finds credentials for an image's registry.

    Lookup order: the configured Docker config file, the current user's
    default ``~/.docker/config.json``, then an interactive prompt.
    """

    def __init__(
        self,
        docker_config_path: str = "",
        prompt: Callable[[str], AuthConfig] = prompt_for_credentials,
    ) -> None:
        self._paths = list(dict.fromkeys(p for p in (docker_config_path, DEFAULT_DOCKER_CONFIG_PATH) if p))
        self._prompt = prompt

    def resolve(self, image: str) -> str:
        """Return encoded credentials for *image*'s registry."""
        registry = ImageReference(image).registry
        for path in self._paths:
            _log.info("reading Docker credentials", image=image, path=path)
            try:
                config = read_auth_config(path, registry)
            except CredentialsError as exc:
                _log.debug("no usable credentials", path=path, registry=registry, error=str(exc))
                continue
            return encode_auth_config(replace(config, server_address=config.server_address or registry))
        return encode_auth_config(self._prompt(registry))


def _hostname(key: str) -> str:
    host = key.removeprefix("https://").removeprefix("http://").split("/", 1)[0]
    if host in _DOCKER_HUB_KEYS:
        return DOCKER_HUB
    return host
