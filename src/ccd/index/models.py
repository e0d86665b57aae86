"""Data model for the directory index.

Transient (traversal):
- DirectoryObservation: one record per visited directory or marker hit

Persisted:
- IndexEntry: absolute path plus keyword set
- Index: entries ordered by (depth, path)

Reporting:
- Diagnostic: a recovered per-item problem (skipped directory, bad keyword line)
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePath

from ccd.core.errors import CcdError, ErrorCode

KEYWORD_PREFIX = "#"


def path_depth(path: str) -> int:
    """Number of segments below the filesystem root ("/x/project" -> 2)."""
    return len(PurePath(path).parts) - 1


class ObservationKind(str, Enum):
    PLAIN_DIRECTORY = "plain_directory"
    MARKER_HIT = "marker_hit"


@dataclass(frozen=True, slots=True)
class DirectoryObservation:
    """One traversal observation.

    For MARKER_HIT, ``path`` is the directory containing the marker (the
    candidate workspace root) and ``marker`` is the marker's base name.
    ``depth`` counts segments relative to the traversal root (root = 0).
    """

    path: str
    depth: int
    kind: ObservationKind
    marker: str | None = None

    @classmethod
    def plain(cls, path: str, depth: int) -> DirectoryObservation:
        return cls(path=path, depth=depth, kind=ObservationKind.PLAIN_DIRECTORY)

    @classmethod
    def marker_hit(cls, parent: str, depth: int, marker: str) -> DirectoryObservation:
        return cls(path=parent, depth=depth, kind=ObservationKind.MARKER_HIT, marker=marker)


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A recovered per-item problem, surfaced to the user as a warning."""

    code: ErrorCode
    message: str
    path: str | None = None

    @classmethod
    def from_error(cls, error: CcdError) -> Diagnostic:
        path = error.details.get("path")
        return cls(code=error.code, message=error.message, path=str(path) if path else None)


@dataclass(frozen=True, slots=True)
class IndexEntry:
    """One persisted record: a directory and its keywords."""

    path: str
    keywords: frozenset[str] = field(default_factory=frozenset)

    @property
    def depth(self) -> int:
        return path_depth(self.path)

    @property
    def sort_key(self) -> tuple[int, str]:
        return (self.depth, self.path)

    def to_line(self) -> str:
        """Serialize as ``<path>[ #kw1 #kw2 ...]`` with keywords sorted."""
        # A path ending in " #word" reads back as that keyword; such names are not escaped
        if not self.keywords:
            return self.path
        tags = " ".join(f"{KEYWORD_PREFIX}{kw}" for kw in sorted(self.keywords))
        return f"{self.path} {tags}"


@dataclass(frozen=True, slots=True)
class Index:
    """Immutable, ordered snapshot of index entries."""

    entries: tuple[IndexEntry, ...] = ()

    @classmethod
    def from_entries(cls, entries: Iterable[IndexEntry]) -> Index:
        """Order entries by (depth, path); later duplicates of a path are dropped."""
        unique: dict[str, IndexEntry] = {}
        for entry in entries:
            unique.setdefault(entry.path, entry)
        return cls(entries=tuple(sorted(unique.values(), key=lambda e: e.sort_key)))

    @property
    def paths(self) -> tuple[str, ...]:
        return tuple(e.path for e in self.entries)

    def __iter__(self) -> Iterator[IndexEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)
