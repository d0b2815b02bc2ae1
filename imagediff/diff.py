"""Diff two container images by the source commits between them.

Pipeline, each step running to completion before the next::

    pull x, y -> labels -> (repository, revision) per image
              -> same repository? -> clone -> resolve x, y -> changelog

The first failing step aborts the run with its error; nothing partial is
returned.
"""

from __future__ import annotations

from collections.abc import Mapping

from imagediff.errors import ValidationError
from imagediff.image.labels import vcs_url_and_revision
from imagediff.models.changes import Change
from imagediff.models.config import DockerConfig, Options
from imagediff.observability.logging import get_logger
from imagediff.registry.credentials import CredentialResolver
from imagediff.registry.docker import DockerClient, ImagePuller
from imagediff.repository.clone import Cloner
from imagediff.repository.commits import changelog, resolve_commit
from imagediff.repository.identity import RepositoryIdentity, parse

_log = get_logger("diff")


def diff(
    x: str,
    y: str,
    options: Options | None = None,
    docker: DockerClient | None = None,
    docker_config: DockerConfig | None = None,
) -> list[Change]:
    """Return the changes between the sources of images *x* (older) and *y* (newer)."""
    options = options or Options()
    if docker is None:
        docker_config = docker_config or DockerConfig()
        with DockerClient(docker_config.host, timeout=docker_config.timeout_seconds) as client:
            return diff(x, y, options, docker=client)

    puller = ImagePuller(docker, CredentialResolver(options.docker_config_path))
    puller.ensure(x)
    puller.ensure(y)
    return diff_labels(x, y, docker.image_labels(x), docker.image_labels(y), options)


def diff_labels(
    x: str,
    y: str,
    x_labels: Mapping[str, str] | None,
    y_labels: Mapping[str, str] | None,
    options: Options | None = None,
    cloner: Cloner | None = None,
) -> list[Change]:
    """Compute the changelog from two images' label sets."""
    options = options or Options()
    x_repo, x_rev = repo_and_revision(x, x_labels)
    y_repo, y_rev = repo_and_revision(y, y_labels)
    validate(x_repo, y_repo)

    cloner = cloner or Cloner(options.git)
    with cloner.clone(x_repo) as cloned:
        x_commit = resolve_commit(cloned.repo, x_rev)
        y_commit = resolve_commit(cloned.repo, y_rev)
        changes = changelog(cloned.repo, x_commit, y_commit)
    _log.info("diff computed", x=x, y=y, repository=str(x_repo), changes=len(changes))
    return changes


def repo_and_revision(image: str, labels: Mapping[str, str] | None) -> tuple[RepositoryIdentity, str]:
    """Extract the repository identity and revision recorded in *image*'s labels.

    Raises:
        ValidationError: no VCS URL or no revision label.
        ParseError:      the VCS URL is not a recognised HTTPS/SSH form.
    """
    vcs_url, revision = vcs_url_and_revision(labels)
    if not vcs_url:
        raise ValidationError(f"no repository for {image}")
    if not revision:
        raise ValidationError(f"no commit hash for {image}")
    return parse(vcs_url), revision


def validate(x_repo: RepositoryIdentity, y_repo: RepositoryIdentity) -> None:
    """Refuse to diff images built from different repositories."""
    if x_repo != y_repo:
        raise ValidationError(f"source code repositories do not match: {x_repo} != {y_repo}")
