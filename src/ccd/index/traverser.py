"""Filesystem traversal with ignore-pattern pruning and marker detection.

One ``os.scandir`` call per directory serves both purposes: the listing is
checked for marker names and the subdirectories it names are queued (unless
ignored). Ignored directories are never listed, so no traversal cost is paid
below them.

Usage::

    traverser = traverse(Path.home(), patterns)
    for observation in traverser:
        ...
    traverser.stats.directories_read
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from ccd.config.patterns import PatternSet
from ccd.core.errors import TraversalError
from ccd.core.logging import get_logger
from ccd.index.models import Diagnostic, DirectoryObservation

log = get_logger("traverser")


def normalize_root(root: Path | str) -> str:
    """Absolute, normalized path without a trailing separator. Symlinks are kept."""
    return os.path.normpath(os.path.abspath(os.path.expanduser(str(root))))


def unstorable_reason(name: str) -> str | None:
    """Why name cannot round-trip through the line-based index file, or None."""
    if "\n" in name or "\r" in name:
        return "name contains a line break"
    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        return "name is not valid UTF-8"
    return None


def _printable(path: str) -> str:
    return path.encode("utf-8", "backslashreplace").decode("utf-8").replace("\n", "\\n")


@dataclass
class TraversalStats:
    """Traversal cost counters."""

    directories_read: int = 0
    pruned: int = 0
    skipped: int = 0
    marker_hits: int = 0


@dataclass
class Traverser:
    """Single-use iterator of DirectoryObservation.

    Once exhausted it stays exhausted; create a new Traverser per run.
    Construction fails with TraversalError when the root does not exist or is
    not a directory. A root that exists but cannot be listed fails on the
    first iteration step.
    """

    root: str
    patterns: PatternSet
    stats: TraversalStats = field(default_factory=TraversalStats)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    _walk: Iterator[DirectoryObservation] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.root = normalize_root(self.root)
        if not os.path.exists(self.root):
            raise TraversalError.root_inaccessible(self.root, "does not exist")
        if not os.path.isdir(self.root):
            raise TraversalError.root_inaccessible(self.root, "not a directory")
        if reason := unstorable_reason(self.root):
            raise TraversalError.root_inaccessible(_printable(self.root), reason)
        self._walk = self._generate()

    def __iter__(self) -> Iterator[DirectoryObservation]:
        return self

    def __next__(self) -> DirectoryObservation:
        return next(self._walk)

    def _list(self, path: str) -> list[os.DirEntry[str]] | None:
        try:
            with os.scandir(path) as it:
                return sorted(it, key=lambda e: e.name)
        except OSError as e:
            reason = e.strerror or type(e).__name__
            if path == self.root:
                raise TraversalError.root_inaccessible(path, reason) from e
            error = TraversalError.unreadable_dir(path, reason)
            log.info("directory_skipped", path=path, reason=reason)
            self.diagnostics.append(Diagnostic.from_error(error))
            self.stats.skipped += 1
            return None

    def _skip_unstorable(self, path: str, reason: str) -> None:
        error = TraversalError.unstorable_name(_printable(path), reason)
        log.info("directory_skipped", path=error.details["path"], reason=reason)
        self.diagnostics.append(Diagnostic.from_error(error))
        self.stats.skipped += 1

    def _generate(self) -> Iterator[DirectoryObservation]:
        if self.patterns.is_ignored(self.root):
            log.warning("root_ignored", root=self.root)
            self.stats.pruned += 1
            return

        # Depth-first, pre-order, children in name order
        stack: list[tuple[str, int]] = [(self.root, 0)]
        while stack:
            path, depth = stack.pop()
            entries = self._list(path)
            if entries is None:
                continue
            self.stats.directories_read += 1
            log.debug("directory_read", path=path, depth=depth)
            yield DirectoryObservation.plain(path, depth)

            children: list[str] = []
            for entry in entries:
                if self.patterns.is_marker(entry.name):
                    self.stats.marker_hits += 1
                    yield DirectoryObservation.marker_hit(path, depth, entry.name)
                try:
                    is_dir = entry.is_dir(follow_symlinks=False)
                except OSError:
                    is_dir = False
                if not is_dir:
                    continue
                child = os.path.join(path, entry.name)
                if self.patterns.is_ignored(child):
                    self.stats.pruned += 1
                    log.debug("directory_pruned", path=child)
                    continue
                if reason := unstorable_reason(entry.name):
                    self._skip_unstorable(child, reason)
                    continue
                children.append(child)

            stack.extend((child, depth + 1) for child in reversed(children))


def traverse(root: Path | str, patterns: PatternSet) -> Traverser:
    """Start a traversal of root. See Traverser."""
    return Traverser(root=str(root), patterns=patterns)
