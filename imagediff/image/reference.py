"""Docker image reference parsing.

Follows the normalization rules of the docker CLI: a reference without an
explicit registry lives on Docker Hub, and official images gain the
``library/`` namespace::

    redis               -> docker.io / library/redis : latest
    quay.io/acme/api:v2 -> quay.io   / acme/api      : v2
    localhost:5000/api  -> localhost:5000 / api      : latest
"""

from __future__ import annotations

DOCKER_HUB = "docker.io"
DOCKER_HUB_INDEX_URL = "https://index.docker.io/v1/"
_DOCKER_HUB_ALIASES = {"index.docker.io", "registry-1.docker.io"}
_DEFAULT_TAG = "latest"


class ImageReference(str):
    """An image reference string such as ``quay.io/acme/api:v2``."""

    def _split(self) -> tuple[str, str, str, str]:
        """Return ``(registry, repository, tag, digest)``."""
        remainder, _, digest = self.partition("@")
        name, tag = remainder, ""
        last_slash = remainder.rfind("/")
        colon = remainder.rfind(":")
        if colon > last_slash:
            name, tag = remainder[:colon], remainder[colon + 1 :]

        first, sep, rest = name.partition("/")
        if sep and ("." in first or ":" in first or first == "localhost"):
            registry, repository = first, rest
        else:
            registry, repository = DOCKER_HUB, name
        if registry in _DOCKER_HUB_ALIASES:
            registry = DOCKER_HUB
        if registry == DOCKER_HUB and "/" not in repository:
            repository = f"library/{repository}"
        return registry, repository, tag, digest

    @property
    def registry(self) -> str:
        return self._split()[0]

    @property
    def repository(self) -> str:
        return self._split()[1]

    @property
    def tag(self) -> str:
        registry, repository, tag, digest = self._split()
        if not tag and not digest:
            return _DEFAULT_TAG
        return tag

    @property
    def digest(self) -> str:
        return self._split()[3]

    @property
    def from_image(self) -> str:
        """Image name as the Docker Engine pull API expects it, without tag."""
        registry, repository, _tag, _digest = self._split()
        return f"{registry}/{repository}"

    @property
    def pull_tag(self) -> str:
        """Tag or digest to pull."""
        return self.digest or self.tag
