"""Shared fixtures for imagediff integration tests.

Builds small throwaway Git repositories on disk with GitPython so history
walking and cloning run against real commit objects.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import git
import pytest

_ACTOR = git.Actor("Imagediff Test", "test@example.com")


@dataclass
class SourceRepo:
    """A repository on disk plus its commits by name."""

    path: Path
    repo: git.Repo
    commits: dict[str, git.Commit]


def commit(
    source: SourceRepo,
    name: str,
    minute: int,
    parents: list[git.Commit] | None = None,
    head: bool = True,
) -> git.Commit:
    """Record a commit named *name*, touching ``<name>.txt``."""
    (source.path / f"{name}.txt").write_text(f"{name}\n")
    source.repo.index.add([f"{name}.txt"])
    timestamp = f"2024-01-01T00:{minute:02d}:00"
    created = source.repo.index.commit(
        f"{name}: change\n\nDetails for {name}.\n",
        parent_commits=parents,
        head=head,
        author=_ACTOR,
        committer=_ACTOR,
        author_date=timestamp,
        commit_date=timestamp,
    )
    source.commits[name] = created
    return created


def init_source(tmp_path: Path) -> SourceRepo:
    path = tmp_path / "source"
    path.mkdir()
    return SourceRepo(path=path, repo=git.Repo.init(path), commits={})


@pytest.fixture
def linear_repo(tmp_path: Path) -> SourceRepo:
    """``root <- c1 <- c2 <- c3`` with HEAD at c3."""
    source = init_source(tmp_path)
    for minute, name in enumerate(["root", "c1", "c2", "c3"]):
        commit(source, name, minute)
    return source


@pytest.fixture
def merge_repo(tmp_path: Path) -> SourceRepo:
    """``root <- fork <- mainline <- merge`` with ``fork <- feature`` merged in."""
    source = init_source(tmp_path)
    root = commit(source, "root", 0)
    fork = commit(source, "fork", 1, parents=[root])
    feature = commit(source, "feature", 2, parents=[fork], head=False)
    mainline = commit(source, "mainline", 3, parents=[fork])
    commit(source, "merge", 4, parents=[mainline, feature])
    return source


@pytest.fixture
def skewed_merge_repo(tmp_path: Path) -> SourceRepo:
    """Like ``merge_repo`` but the feature commit's clock is behind its fork point."""
    source = init_source(tmp_path)
    root = commit(source, "root", 0)
    fork = commit(source, "fork", 5, parents=[root])
    feature = commit(source, "feature", 1, parents=[fork], head=False)
    mainline = commit(source, "mainline", 6, parents=[fork])
    commit(source, "merge", 7, parents=[mainline, feature])
    return source
