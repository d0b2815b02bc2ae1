"""Repository identity: the normalized host/organization/name of a Git remote.

Image labels point at source repositories in many spellings::

    https://github.com/acme/api
    https://github.com/acme/api.git/tree/master/cmd/server
    git@github.com:acme/api.git

All of them describe the same repository. ``parse`` reduces each spelling to
a ``RepositoryIdentity`` so that two images can be checked for a shared
repository by plain equality, and so that the clone endpoints can be derived
in one canonical form regardless of how the label was written.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from imagediff.errors import ParseError

_RE_HTTPS = re.compile(r"https://([^/]+)/([^/]+)/([^/?#]+)")
_RE_SSH = re.compile(r"git@([^:/]+):([^/]+)/([^/?#]+)")

_DOT_GIT = ".git"


@dataclass(frozen=True)
class RepositoryIdentity:
    """Immutable ``{host, organization, name}`` triple.

    Equality is exact and case-sensitive on all three fields.
    """

    host: str
    organization: str
    name: str

    @property
    def https_url(self) -> str:
        """HTTPS URL to clone this repository."""
        return f"https://{self.host}/{self.organization}/{self.name}.git"

    @property
    def ssh_url(self) -> str:
        """SSH endpoint to clone this repository."""
        return f"git@{self.host}:{self.organization}/{self.name}.git"

    def __str__(self) -> str:
        return f"{self.host}/{self.organization}/{self.name}"


def parse(url: str) -> RepositoryIdentity:
    """Create a RepositoryIdentity from an HTTPS URL or SSH connection string.

    Raises:
        ParseError: *url* matches neither form.
    """
    candidate = url.strip()
    for pattern in (_RE_HTTPS, _RE_SSH):
        match = pattern.search(candidate)
        if match:
            host, organization, name = match.groups()
            return RepositoryIdentity(
                host=host,
                organization=organization,
                name=_without_dot_git(name),
            )
    raise ParseError(url)


def _without_dot_git(name: str) -> str:
    return name.removesuffix(_DOT_GIT) if name != _DOT_GIT else name
