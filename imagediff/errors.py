"""Error taxonomy for imagediff.

Every failure surfaced to the operator is an ``ImageDiffError``. Components
wrap lower-level exceptions (httpx, GitPython, OS errors) into one of the
kinds below with ``raise ... from exc`` so the original cause stays attached.
"""

from __future__ import annotations


class ImageDiffError(Exception):
    """Base class for all imagediff failures."""


class ParseError(ImageDiffError):
    """A VCS URL matched neither the HTTPS nor the SSH form."""

    def __init__(self, url: str) -> None:
        super().__init__(f"failed to parse URL: [{url}]")
        self.url = url


class ValidationError(ImageDiffError):
    """Image metadata is missing or the two images disagree on their repository."""


class CloneError(ImageDiffError):
    """Cloning a repository failed."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"failed to clone [{url}]: {reason}")
        self.url = url
        self.reason = reason


class AuthenticationRequiredError(CloneError):
    """The remote refused an anonymous clone and asked for credentials."""


class NotFoundError(ImageDiffError):
    """Something looked up by reference does not exist."""


class CommitNotFoundError(NotFoundError):
    """A commit reference could not be located in the walked history."""

    def __init__(self, ref: str) -> None:
        super().__init__(f"commit with hash [{ref}] could not be found")
        self.ref = ref


class RegistryError(ImageDiffError):
    """The container engine or registry rejected a request."""


class RegistryAuthError(RegistryError):
    """The registry requires (other) credentials for this image."""


class CredentialsError(ImageDiffError):
    """No usable registry credentials could be obtained."""
