"""Commit resolution and changelog computation over a cloned repository.

Both operations stream history from ``git rev-list`` and stop as soon as
they have their answer: on large repositories the commit the caller is
looking for is usually close to the starting point, and nothing beyond it
is materialized.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import closing
from typing import TYPE_CHECKING

from imagediff.errors import CommitNotFoundError
from imagediff.models.changes import Change
from imagediff.observability.logging import get_logger

if TYPE_CHECKING:
    from git import Commit, Repo

_log = get_logger("repository.commits")


def resolve_commit(repo: Repo, ref: str) -> Commit:
    """Resolve a full or abbreviated hash to a commit reachable from HEAD.

    History is walked in reverse-chronological order from HEAD and the first
    commit whose hash starts with *ref* is returned. A prefix shared by
    several commits is not reported as ambiguous: the most recent one wins.

    Raises:
        CommitNotFoundError: no commit reachable from HEAD matches *ref*,
            or the repository has no commits at all.
    """
    if not ref:
        raise CommitNotFoundError(ref)
    try:
        head = repo.head.commit
    except ValueError as exc:
        _log.debug("repository has no commits", ref=ref, err=str(exc))
        raise CommitNotFoundError(ref) from exc
    with closing(repo.iter_commits(head.hexsha)) as history:
        for commit in history:
            if commit.hexsha.startswith(ref):
                _log.debug("commit resolved", ref=ref, revision=commit.hexsha)
                return commit
    raise CommitNotFoundError(ref)


def iter_range(repo: Repo, start: Commit, end: Commit) -> Iterator[Commit]:
    """Yield the commits in ``(start, end]``, each one before its parents.

    The range is walked by git in topological order, so a commit is only
    listed once every descendant of it inside the range has been, whatever
    the committer clocks say. Commits of merged branches are part of the
    range; nothing reachable from *start* is.

    Raises:
        CommitNotFoundError: *start* is not an ancestor of *end*.
    """
    if not repo.is_ancestor(start.hexsha, end.hexsha):
        raise CommitNotFoundError(start.hexsha)
    with closing(repo.iter_commits(f"{start.hexsha}..{end.hexsha}", topo_order=True)) as commits:
        yield from commits


def changelog(repo: Repo, start: Commit, end: Commit) -> list[Change]:
    """Return the changes in ``(start, end]``, most recent first.

    *start* is excluded and *end* included.

    Raises:
        CommitNotFoundError: *start* is not an ancestor of *end*.
    """
    changes = [
        Change(revision=commit.hexsha, message=commit.message)
        for commit in iter_range(repo, start, end)
    ]
    _log.debug("changelog computed", start=start.hexsha, end=end.hexsha, changes=len(changes))
    return changes
