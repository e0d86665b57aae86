"""Rebuild pipeline: PatternSet -> Traverser -> resolver -> keywords -> index file.

Every stage receives its configuration explicitly; nothing is read from
module-level state, so repeated or concurrent runs in one process do not
interfere.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path

from ccd.config.models import CcdConfig
from ccd.config.patterns import PatternSet, load_pattern_set
from ccd.core.logging import get_logger
from ccd.index.builder import build_index, write_index
from ccd.index.keywords import KeywordLoader
from ccd.index.models import Diagnostic, Index
from ccd.index.resolver import resolve_workspaces
from ccd.index.traverser import TraversalStats, traverse

log = get_logger("rebuild")


@dataclass
class BuildResult:
    """In-memory result of one pipeline run."""

    root: str
    index: Index
    workspace_roots: frozenset[str]
    collapsed: int
    stats: TraversalStats
    keyword_files: int = 0
    diagnostics: list[Diagnostic] = field(default_factory=list)


@dataclass
class RebuildResult(BuildResult):
    index_path: Path = Path()
    elapsed_s: float = 0.0


def build_from_root(
    root: Path | str,
    patterns: PatternSet,
    *,
    keyword_file: str,
) -> BuildResult:
    """Run the pipeline without persisting. Raises TraversalError for a bad root."""
    traverser = traverse(root, patterns)
    resolved = resolve_workspaces(traverser)
    loader = KeywordLoader(keyword_file)
    index = build_index(resolved.paths, loader)

    return BuildResult(
        root=traverser.root,
        index=index,
        workspace_roots=resolved.roots,
        collapsed=resolved.collapsed,
        stats=traverser.stats,
        keyword_files=loader.files_read,
        diagnostics=[*traverser.diagnostics, *loader.diagnostics],
    )


def rebuild_index(
    config: CcdConfig,
    *,
    root: Path | str | None = None,
    patterns: PatternSet | None = None,
) -> RebuildResult:
    """Full rebuild: load patterns, build, and atomically replace the index file.

    Raises:
        TraversalError: the traversal root is missing or unreadable.
        IndexLoadError: the index file could not be written.
    """
    start = time.perf_counter()
    diagnostics: list[Diagnostic] = []
    if patterns is None:
        loaded = load_pattern_set(config.patterns)
        patterns = loaded.patterns
        diagnostics.extend(loaded.diagnostics)

    built = build_from_root(
        root if root is not None else config.index.root,
        patterns,
        keyword_file=config.index.keyword_file,
    )
    index_path = Path(config.index.index_path)
    write_index(built.index, index_path)
    elapsed = time.perf_counter() - start

    log.info(
        "rebuild_done",
        root=built.root,
        entries=len(built.index),
        workspaces=len(built.workspace_roots),
        directories_read=built.stats.directories_read,
        pruned=built.stats.pruned,
        skipped=built.stats.skipped,
        warnings=len(diagnostics) + len(built.diagnostics),
        elapsed_s=round(elapsed, 3),
    )
    return RebuildResult(
        root=built.root,
        index=built.index,
        workspace_roots=built.workspace_roots,
        collapsed=built.collapsed,
        stats=built.stats,
        keyword_files=built.keyword_files,
        diagnostics=[*diagnostics, *built.diagnostics],
        index_path=index_path,
        elapsed_s=elapsed,
    )
