"""Workspace boundary resolution.

A directory only proves itself a workspace root through a marker found in
its own listing, so boundaries cannot be enforced while walking. Resolution
is a pure post-pass over the full observation set:

1. D = every plain directory, R = every marker parent
2. R' = R minus roots lying strictly below another root (outermost wins)
3. D' = D minus directories lying strictly below a root in R'
4. result = D' | R'
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass

from ccd.index.models import DirectoryObservation, ObservationKind


@dataclass(frozen=True, slots=True)
class ResolvedCandidates:
    """Index candidates (paths only) and the workspace roots that shaped them."""

    paths: frozenset[str]
    roots: frozenset[str]
    collapsed: int = 0


def _ancestors(path: str) -> Iterable[str]:
    """Strict ancestors of path, nearest first."""
    current = path
    while True:
        parent = os.path.dirname(current)
        if parent == current:
            return
        yield parent
        current = parent


def _has_ancestor_in(path: str, roots: frozenset[str]) -> bool:
    return any(ancestor in roots for ancestor in _ancestors(path))


def minimal_roots(roots: Iterable[str]) -> frozenset[str]:
    """Drop every root that lies strictly below another root."""
    all_roots = frozenset(roots)
    return frozenset(r for r in all_roots if not _has_ancestor_in(r, all_roots))


def resolve_workspaces(observations: Iterable[DirectoryObservation]) -> ResolvedCandidates:
    """Collapse workspace descendants out of the observed directory set."""
    directories: set[str] = set()
    marker_parents: set[str] = set()
    for obs in observations:
        if obs.kind is ObservationKind.MARKER_HIT:
            marker_parents.add(obs.path)
        else:
            directories.add(obs.path)

    roots = minimal_roots(marker_parents)
    kept = {d for d in directories if not _has_ancestor_in(d, roots)}
    # Roots are kept even when no plain observation was recorded for them
    kept |= roots

    return ResolvedCandidates(
        paths=frozenset(kept),
        roots=roots,
        collapsed=len(directories - kept),
    )
