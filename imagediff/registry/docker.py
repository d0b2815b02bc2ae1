"""Docker Engine API client.

Talks to the local daemon over its HTTP API with httpx, through the unix
socket by default. Only the three calls imagediff needs are implemented:
list images, pull an image and inspect an image.
"""

from __future__ import annotations

import json
from types import TracebackType
from typing import Any, NoReturn

import httpx

from imagediff.errors import RegistryAuthError, RegistryError
from imagediff.image.reference import ImageReference
from imagediff.models.config import DEFAULT_DOCKER_HOST
from imagediff.observability.logging import get_logger
from imagediff.registry.credentials import CredentialResolver

_log = get_logger("registry.docker")

# Some registries (e.g. quay.io) answer an unauthorised pull with a 500 and
# an "unauthorized:" message rather than a 401/403.
_AUTH_FAILURE_MARKERS = (
    "unauthorized",
    "authentication required",
    "pull access denied",
    "requested access to the resource is denied",
)


def _connection_for(host: str) -> tuple[str, httpx.HTTPTransport | None]:
    """Map a DOCKER_HOST value to an httpx base URL and transport."""
    if host.startswith("unix://"):
        return "http://docker", httpx.HTTPTransport(uds=host.removeprefix("unix://"))
    if host.startswith("tcp://"):
        return "http://" + host.removeprefix("tcp://"), None
    if host.startswith(("http://", "https://")):
        return host, None
    raise RegistryError(f"unsupported Docker host: {host}")


def _is_auth_failure(status_code: int, message: str) -> bool:
    if status_code in (401, 403):
        return True
    lowered = message.lower()
    return any(marker in lowered for marker in _AUTH_FAILURE_MARKERS)


def _json_body(response: httpx.Response, failure: str, expected: type) -> Any:
    """Decode a daemon response that must be a JSON *expected* (list or dict)."""
    try:
        body = response.json()
    except ValueError as exc:
        raise RegistryError(f"{failure}: malformed response from the Docker daemon") from exc
    if not isinstance(body, expected):
        raise RegistryError(f"{failure}: malformed response from the Docker daemon")
    return body


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict) and "message" in body:
        return str(body["message"])
    return response.text[:200]


class DockerClient:
    """Minimal synchronous Docker Engine API client.

    Args:
        host:      DOCKER_HOST-style address (``unix://``, ``tcp://``, ``http(s)://``).
        timeout:   Per-request timeout in seconds; pulls stream under it.
        transport: Override the httpx transport (tests use ``httpx.MockTransport``).

    Raises:
        RegistryError: *host* uses a scheme other than unix, tcp or http(s).
    """

    def __init__(
        self,
        host: str = DEFAULT_DOCKER_HOST,
        timeout: float = 300.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        base_url, default_transport = _connection_for(host)
        self._client = httpx.Client(
            base_url=base_url,
            transport=transport or default_transport,
            timeout=timeout,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> DockerClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def list_images(self, image: str) -> list[dict[str, Any]]:
        """List local images matching the *image* reference."""
        params = {"filters": json.dumps({"reference": [image]})}
        try:
            response = self._client.get("/images/json", params=params)
        except httpx.HTTPError as exc:
            raise RegistryError(f"cannot list images for {image}: {exc}") from exc
        if response.is_error:
            raise RegistryError(f"cannot list images for {image}: {_error_message(response)}")
        return _json_body(response, f"cannot list images for {image}", list)

    def image_exists_locally(self, image: str) -> bool:
        return len(self.list_images(image)) > 0

    def pull(self, image: str, registry_auth: str | None = None) -> None:
        """Pull *image*, draining the daemon's JSON progress stream.

        Raises:
            RegistryAuthError: the registry wants (other) credentials.
            RegistryError:     any other pull failure.
        """
        ref = ImageReference(image)
        params = {"fromImage": ref.from_image, "tag": ref.pull_tag}
        headers = {"X-Registry-Auth": registry_auth} if registry_auth else {}
        try:
            with self._client.stream("POST", "/images/create", params=params, headers=headers) as response:
                if response.is_error:
                    response.read()
                    self._raise_pull_error(image, response.status_code, _error_message(response))
                for line in response.iter_lines():
                    if not line.strip():
                        continue
                    message = json.loads(line)
                    if message.get("error"):
                        detail = message.get("errorDetail") or {}
                        self._raise_pull_error(image, 200, str(detail.get("message") or message["error"]))
                    _log.debug("pull progress", image=image, status=message.get("status", ""))
        except httpx.HTTPError as exc:
            raise RegistryError(f"failed to pull {image}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise RegistryError(f"failed to pull {image}: malformed progress message") from exc

    @staticmethod
    def _raise_pull_error(image: str, status_code: int, message: str) -> NoReturn:
        if _is_auth_failure(status_code, message):
            raise RegistryAuthError(f"failed to pull {image}: {message}")
        raise RegistryError(f"failed to pull {image}: {message}")

    def image_labels(self, image: str) -> dict[str, str]:
        """Return the labels of the local image *image* (empty when it has none)."""
        try:
            response = self._client.get(f"/images/{image}/json")
        except httpx.HTTPError as exc:
            raise RegistryError(f"cannot inspect {image}: {exc}") from exc
        if response.status_code == 404:
            raise RegistryError(f"image not found: {image}")
        if response.is_error:
            raise RegistryError(f"cannot inspect {image}: {_error_message(response)}")
        inspected = _json_body(response, f"cannot inspect {image}", dict)
        config = inspected.get("Config") or {}
        return dict(config.get("Labels") or {})


class ImagePuller:
    """Makes an image available locally, asking for credentials only when needed."""

    def __init__(self, docker: DockerClient, credentials: CredentialResolver) -> None:
        self._docker = docker
        self._credentials = credentials

    def ensure(self, image: str) -> None:
        """Pull *image* unless it is already present locally.

        The first pull is anonymous; a RegistryAuthError triggers exactly
        one more attempt with resolved credentials.
        """
        logger = _log.bind(image=image)
        # Pulling is slow even when the image is already local.
        if self._docker.image_exists_locally(image):
            logger.info("image already exists locally, nothing to pull")
            return
        logger.info("pulling image")
        try:
            self._docker.pull(image)
        except RegistryAuthError as exc:
            logger.info("anonymous pull refused, retrying with credentials", err=str(exc))
            self._docker.pull(image, registry_auth=self._credentials.resolve(image))
