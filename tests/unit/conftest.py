"""Shared fakes for imagediff unit tests.

Commit graphs are built from lightweight stand-ins exposing the attributes
imagediff reads (``hexsha``, ``message``, ``parents``, ``committed_date``)
and served by a mock repository that answers revision and range queries,
so resolution and changelog logic can be tested without git.
"""

from __future__ import annotations

import hashlib
from collections.abc import Iterator
from dataclasses import dataclass, field
from unittest.mock import MagicMock

_EPOCH = 1_700_000_000


@dataclass(eq=False)
class FakeCommit:
    hexsha: str
    message: str
    committed_date: int
    parents: list[FakeCommit] = field(default_factory=list)


def sha(name: str) -> str:
    """Deterministic 40-char hex hash for a commit name."""
    return hashlib.sha1(name.encode()).hexdigest()


def make_commit(
    name: str,
    *parents: FakeCommit,
    minutes: int = 0,
    message: str | None = None,
) -> FakeCommit:
    """Create a commit named *name*, committed *minutes* after a fixed epoch."""
    return FakeCommit(
        hexsha=sha(name),
        message=message if message is not None else f"{name}\n\nBody of {name}.\n",
        committed_date=_EPOCH + minutes * 60,
        parents=list(parents),
    )


def make_linear_history(*names: str) -> list[FakeCommit]:
    """Create ``names[0] <- names[1] <- ...``, oldest first."""
    commits: list[FakeCommit] = []
    for index, name in enumerate(names):
        parents = [commits[-1]] if commits else []
        commits.append(make_commit(name, *parents, minutes=index))
    return commits


def history_from(head: FakeCommit) -> Iterator[FakeCommit]:
    """Reverse-chronological walk of a linear fake history starting at *head*."""
    current: FakeCommit | None = head
    while current is not None:
        yield current
        current = current.parents[0] if current.parents else None


def make_repo(head: FakeCommit) -> MagicMock:
    """A GitPython-shaped repository over the linear history ending at *head*.

    ``iter_commits`` accepts a single revision or a ``start..end`` range and
    ``is_ancestor`` answers from the same history.
    """
    by_hash = {commit.hexsha: commit for commit in history_from(head)}

    def ancestors(hexsha: str) -> set[str]:
        return {commit.hexsha for commit in history_from(by_hash[hexsha])}

    def iter_commits(rev: str, **kwargs: object) -> Iterator[FakeCommit]:
        start, _, end = rev.rpartition("..")
        excluded = ancestors(start) if start else set()
        for commit in history_from(by_hash[end]):
            if commit.hexsha not in excluded:
                yield commit

    repo = MagicMock()
    repo.head.commit = head
    repo.iter_commits.side_effect = iter_commits
    repo.is_ancestor.side_effect = lambda ancestor, rev: ancestor in ancestors(rev)
    return repo
