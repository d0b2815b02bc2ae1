"""Changelog data structures."""

from __future__ import annotations

from dataclasses import dataclass

SHORT_HASH_LENGTH = 7


@dataclass(frozen=True)
class Change:
    """One commit of a changelog: its full hash and full commit message."""

    revision: str
    message: str

    @property
    def short_revision(self) -> str:
        return self.revision[:SHORT_HASH_LENGTH]

    @property
    def summary(self) -> str:
        """First line of the commit message."""
        return self.message.split("\n", 1)[0]

    def __str__(self) -> str:
        return f"{self.short_revision} {self.summary}"
