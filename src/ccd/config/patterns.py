"""PatternSet: compiled ignore rules and workspace marker names.

Loaded once at the start of every rebuild from two plain-text files:

- ignore file: one regular expression per line, searched against the
  absolute directory path
- markers file: one exact base name per line

Blank lines and lines whose first non-whitespace character is ``#`` are
ignored in both. A missing file means "use the built-in baseline". A file
that exists but cannot be read, or an ignore file holding an invalid regex,
is a ConfigError: that whole set falls back to the baseline and the error is
reported as a warning.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from ccd.config.models import PatternsConfig
from ccd.core.errors import ConfigError
from ccd.core.excludes import DEFAULT_IGNORE_PATTERNS, DEFAULT_MARKER_NAMES
from ccd.core.logging import get_logger
from ccd.index.models import Diagnostic

log = get_logger("patterns")


@dataclass(frozen=True, slots=True)
class PatternSet:
    """Immutable exclusion rules and marker names for one indexing run."""

    ignore_patterns: tuple[re.Pattern[str], ...] = ()
    marker_names: frozenset[str] = frozenset()

    @classmethod
    def compile(cls, ignore: Iterable[str], markers: Iterable[str]) -> PatternSet:
        """Build from raw strings. Raises re.error on an invalid pattern."""
        return cls(
            ignore_patterns=tuple(re.compile(p) for p in ignore),
            marker_names=frozenset(markers),
        )

    @classmethod
    def defaults(cls) -> PatternSet:
        return cls.compile(DEFAULT_IGNORE_PATTERNS, DEFAULT_MARKER_NAMES)

    def is_ignored(self, path: str) -> bool:
        return any(p.search(path) for p in self.ignore_patterns)

    def is_marker(self, name: str) -> bool:
        return name in self.marker_names


@dataclass
class PatternLoadResult:
    patterns: PatternSet
    diagnostics: list[Diagnostic] = field(default_factory=list)
    ignore_source: str = "defaults"
    markers_source: str = "defaults"


def _read_lines(path: Path) -> list[tuple[int, str]] | None:
    """Return (line_no, text) for meaningful lines, or None when absent."""
    if not path.exists():
        return None
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        reason = e.strerror if isinstance(e, OSError) and e.strerror else str(e)
        raise ConfigError.unreadable(str(path), reason) from e
    lines: list[tuple[int, str]] = []
    for line_no, raw in enumerate(text.splitlines(), start=1):
        stripped = raw.strip()
        if not stripped or stripped.startswith("#"):
            continue
        lines.append((line_no, stripped))
    return lines


def load_ignore_patterns(path: Path) -> tuple[re.Pattern[str], ...] | None:
    """Compile the ignore file. None when the file does not exist."""
    lines = _read_lines(path)
    if lines is None:
        return None
    compiled: list[re.Pattern[str]] = []
    for line_no, pattern in lines:
        try:
            compiled.append(re.compile(pattern))
        except re.error as e:
            raise ConfigError.invalid_pattern(str(path), line_no, pattern, str(e)) from e
    return tuple(compiled)


def load_marker_names(path: Path) -> frozenset[str] | None:
    """Read the marker file. None when the file does not exist."""
    lines = _read_lines(path)
    if lines is None:
        return None
    names: set[str] = set()
    for line_no, name in lines:
        if "/" in name:
            raise ConfigError.invalid_value(
                f"{path}:{line_no}", name, "marker names are base names, not paths"
            )
        names.add(name)
    return frozenset(names)


def load_pattern_set(config: PatternsConfig) -> PatternLoadResult:
    """Load both pattern files, falling back to defaults per file on error."""
    defaults = PatternSet.defaults()
    diagnostics: list[Diagnostic] = []

    ignore_source = "defaults"
    ignore_patterns = defaults.ignore_patterns
    try:
        loaded_ignore = load_ignore_patterns(Path(config.ignore_file))
    except ConfigError as e:
        log.info("ignore_config_fallback", error=e.message, path=config.ignore_file)
        diagnostics.append(Diagnostic.from_error(e))
    else:
        if loaded_ignore is not None:
            ignore_patterns = loaded_ignore
            ignore_source = config.ignore_file

    markers_source = "defaults"
    marker_names = defaults.marker_names
    try:
        loaded_markers = load_marker_names(Path(config.markers_file))
    except ConfigError as e:
        log.info("markers_config_fallback", error=e.message, path=config.markers_file)
        diagnostics.append(Diagnostic.from_error(e))
    else:
        if loaded_markers is not None:
            marker_names = loaded_markers
            markers_source = config.markers_file

    log.debug(
        "patterns_loaded",
        ignore_count=len(ignore_patterns),
        marker_count=len(marker_names),
        ignore_source=ignore_source,
        markers_source=markers_source,
    )
    return PatternLoadResult(
        patterns=PatternSet(ignore_patterns=ignore_patterns, marker_names=marker_names),
        diagnostics=diagnostics,
        ignore_source=ignore_source,
        markers_source=markers_source,
    )
