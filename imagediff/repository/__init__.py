"""Source repository handling for imagediff.

Submodules:
    identity -- parse a VCS URL into a normalized RepositoryIdentity.
    clone    -- HTTPS-then-SSH cloning into transient storage.
    commits  -- short-hash resolution and topological changelog walk.
"""

from imagediff.repository.clone import ClonedRepository, Cloner
from imagediff.repository.commits import changelog, iter_range, resolve_commit
from imagediff.repository.identity import RepositoryIdentity, parse

__all__ = [
    "ClonedRepository",
    "Cloner",
    "RepositoryIdentity",
    "changelog",
    "iter_range",
    "parse",
    "resolve_commit",
]
