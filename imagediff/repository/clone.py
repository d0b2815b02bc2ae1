"""Clone a repository into transient storage, HTTPS first, then SSH.

Anonymous HTTPS works for public repositories. When the remote asks for
credentials instead, the clone is retried once over SSH with a private key.
Any other failure (network, repository not found, ...) is terminal.

Clones are bare and blob-less: only commits and trees are fetched, since
the changelog never looks at file contents. The clone lives in a temporary
directory that is deleted when the ``ClonedRepository`` is closed, or
straight away when the clone fails.
"""

from __future__ import annotations

import os
import shlex
import tempfile
from collections.abc import Mapping
from pathlib import Path
from types import TracebackType

import git
from git.exc import GitCommandError, GitError

from imagediff.errors import AuthenticationRequiredError, CloneError
from imagediff.models.config import DEFAULT_SSH_PRIVATE_KEY_PATH, GitOptions
from imagediff.observability.logging import get_logger
from imagediff.repository.identity import RepositoryIdentity

_log = get_logger("repository.clone")

_CLONE_OPTIONS = ["--filter=blob:none"]

# git reports a refused anonymous clone in several ways depending on the
# transport and the server; these are matched against its lower-cased stderr.
_AUTH_FAILURE_MARKERS = (
    "authentication required",
    "authentication failed",
    "could not read username",
    "could not read password",
    "terminal prompts disabled",
    "invalid username or password",
    "the requested url returned error: 401",
    "the requested url returned error: 403",
)

_PRIVATE_KEY_MARKER = "PRIVATE KEY-----"


class ClonedRepository:
    """A cloned repository and the temporary directory that backs it.

    Read-only once constructed. Use as a context manager; leaving the block
    deletes the clone.
    """

    def __init__(self, repo: git.Repo, workdir: tempfile.TemporaryDirectory[str], url: str) -> None:
        self.repo = repo
        self.url = url
        self._workdir = workdir

    def close(self) -> None:
        self.repo.close()
        self._workdir.cleanup()

    def __enter__(self) -> ClonedRepository:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class Cloner:
    """Clones repositories described by a ``RepositoryIdentity``."""

    def __init__(self, options: GitOptions | None = None) -> None:
        self._options = options or GitOptions()

    def clone(self, identity: RepositoryIdentity) -> ClonedRepository:
        """Clone *identity* over HTTPS, falling back to SSH on an auth failure.

        Raises:
            CloneError: both attempts failed, the HTTPS attempt failed for a
                reason other than authentication, or no usable private key
                was found for the SSH attempt.
        """
        logger = _log.bind(repository=str(identity))
        if self._options.ssh_only:
            logger.info("cloning repository via SSH")
            return self._clone_ssh(identity)

        logger.info("cloning repository via HTTPS")
        try:
            return _clone(identity.https_url, _https_env())
        except AuthenticationRequiredError as exc:
            logger.info("cloning via HTTPS failed, now retrying via SSH", err=exc.reason)
            return self._clone_ssh(identity)

    def _clone_ssh(self, identity: RepositoryIdentity) -> ClonedRepository:
        key_path = private_key_path(self._options, identity.ssh_url)
        return _clone(identity.ssh_url, _ssh_env(key_path))


def private_key_path(options: GitOptions, url: str = "") -> Path:
    """Locate and sanity-check the private key used for SSH clones.

    The configured path wins; the current user's ``~/.ssh/id_rsa`` is the
    fallback.

    Raises:
        CloneError: the file is missing, unreadable or not a private key.
    """
    raw = options.ssh_private_key_path
    if not raw:
        _log.debug("no private SSH key provided, using current user's default")
        raw = DEFAULT_SSH_PRIVATE_KEY_PATH
    path = Path(raw).expanduser()
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise CloneError(url, f"cannot read private SSH key {path}: {exc}") from exc
    if _PRIVATE_KEY_MARKER not in content:
        raise CloneError(url, f"{path} does not contain a private SSH key")
    return path


def _https_env(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    # Never prompt, and ignore configured credential helpers: the HTTPS
    # attempt is anonymous. The override is appended after any GIT_CONFIG_*
    # entries already present in the environment.
    environ = os.environ if environ is None else environ
    try:
        index = max(int(environ.get("GIT_CONFIG_COUNT", "0")), 0)
    except ValueError:
        index = 0
    return {
        "GIT_TERMINAL_PROMPT": "0",
        "GIT_CONFIG_COUNT": str(index + 1),
        f"GIT_CONFIG_KEY_{index}": "credential.helper",
        f"GIT_CONFIG_VALUE_{index}": "",
    }


def _ssh_env(key_path: Path) -> dict[str, str]:
    command = " ".join(
        [
            "ssh",
            "-i",
            shlex.quote(str(key_path)),
            "-o",
            "IdentitiesOnly=yes",
            "-o",
            "BatchMode=yes",
            "-o",
            "StrictHostKeyChecking=accept-new",
        ]
    )
    return {"GIT_TERMINAL_PROMPT": "0", "GIT_SSH_COMMAND": command}


def _clone(url: str, env: dict[str, str]) -> ClonedRepository:
    workdir = tempfile.TemporaryDirectory(prefix="imagediff-")
    try:
        repo = git.Repo.clone_from(
            url,
            workdir.name,
            env=env,
            multi_options=_CLONE_OPTIONS,
            bare=True,
        )
    except GitCommandError as exc:
        workdir.cleanup()
        raise classify_clone_failure(url, exc) from exc
    except GitError as exc:
        workdir.cleanup()
        raise CloneError(url, str(exc)) from exc
    _log.info("repository cloned", url=url)
    return ClonedRepository(repo, workdir, url)


def classify_clone_failure(url: str, exc: GitCommandError) -> CloneError:
    """Turn a failed ``git clone`` into a typed CloneError."""
    stderr = str(exc.stderr).strip()
    reason = stderr or str(exc)
    lowered = stderr.lower()
    if any(marker in lowered for marker in _AUTH_FAILURE_MARKERS):
        return AuthenticationRequiredError(url, reason)
    return CloneError(url, reason)
