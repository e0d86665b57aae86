"""Index module - directory index construction and persistence.

Pipeline stages:
- traverser: pruned filesystem walk emitting DirectoryObservation records
- resolver: folds workspace descendants into their outermost root
- keywords: per-directory keyword files
- builder: ordering, serialization, atomic persistence, loading

High-level entry point is `ccd.index.ops.rebuild_index`.
"""

from ccd.index.models import (
    Diagnostic,
    DirectoryObservation,
    Index,
    IndexEntry,
    ObservationKind,
)

__all__ = [
    "Diagnostic",
    "DirectoryObservation",
    "Index",
    "IndexEntry",
    "ObservationKind",
]
