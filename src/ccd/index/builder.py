"""Index assembly, serialization and persistence.

File format, one line per entry, ordered by (depth, path)::

    <absolute-path>[ #<keyword1> #<keyword2> ...]

Keywords are written sorted so the same inputs always produce the same
bytes. The file is replaced atomically: a temporary file in the target
directory is written, flushed and renamed over the old index, so readers see
either the previous index or the new one. Concurrent rebuilds race; the last
rename wins.
"""

from __future__ import annotations

import os
import re
import tempfile
import time
from collections.abc import Iterable
from pathlib import Path

from ccd.core.errors import IndexLoadError
from ccd.core.logging import get_logger
from ccd.index.keywords import KeywordLoader
from ccd.index.models import KEYWORD_PREFIX, Index, IndexEntry

log = get_logger("builder")

_SECONDS_PER_DAY = 86400.0

_LINE_RE = re.compile(r"^(?P<path>.*?)(?P<tags>(?: #\S+)*)$")


def build_index(candidate_paths: Iterable[str], keyword_loader: KeywordLoader) -> Index:
    """Attach keywords found at each exact path and order the entries."""
    entries = [
        IndexEntry(path=path, keywords=keyword_loader.load(path))
        for path in sorted(set(candidate_paths))
    ]
    return Index.from_entries(entries)


def serialize_index(index: Index) -> str:
    if not index.entries:
        return ""
    return "\n".join(entry.to_line() for entry in index) + "\n"


def parse_index_line(line: str) -> IndexEntry | None:
    """Parse one index line. None for blank or non-absolute lines."""
    stripped = line.rstrip("\n").removesuffix("\r")
    if not stripped.strip():
        return None
    match = _LINE_RE.match(stripped)
    if match is None:
        return None
    path = match.group("path")
    if not os.path.isabs(path):
        return None
    tags = match.group("tags").split()
    keywords = frozenset(t[len(KEYWORD_PREFIX) :].lower() for t in tags if len(t) > 1)
    return IndexEntry(path=path, keywords=keywords)


def parse_index_text(text: str, source: str = "<index>") -> Index:
    entries: list[IndexEntry] = []
    # Only "\n" ends a line; names may hold other Unicode line separators
    for line_no, line in enumerate(text.split("\n"), start=1):
        if not line.strip():
            continue
        entry = parse_index_line(line)
        if entry is None:
            error = IndexLoadError.malformed_line(source, line_no)
            log.warning("index_line_skipped", message=error.message)
            continue
        entries.append(entry)
    return Index.from_entries(entries)


def write_index(index: Index, path: Path) -> None:
    """Atomically replace the index file at path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        data = serialize_index(index).encode("utf-8")
    except UnicodeEncodeError as e:
        raise IndexLoadError.write_failed(str(path), f"entry is not valid UTF-8: {e.reason}") from e
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise IndexLoadError.write_failed(str(path), e.strerror or str(e)) from e
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    log.debug("index_written", path=str(path), entries=len(index))


def load_index(path: Path) -> Index:
    """Read the persisted index. Missing or unreadable files raise IndexLoadError."""
    try:
        with path.open(encoding="utf-8", newline="") as f:
            text = f.read()
    except FileNotFoundError as e:
        raise IndexLoadError.not_found(str(path)) from e
    except (OSError, UnicodeDecodeError) as e:
        reason = e.strerror if isinstance(e, OSError) and e.strerror else str(e)
        raise IndexLoadError.unreadable(str(path), reason) from e
    return parse_index_text(text, source=str(path))


def index_age_days(path: Path, *, now: float | None = None) -> float | None:
    """Age of the index file in days, or None when it does not exist."""
    try:
        mtime = path.stat().st_mtime
    except OSError:
        return None
    current = time.time() if now is None else now
    return max(0.0, (current - mtime) / _SECONDS_PER_DAY)


def is_stale(path: Path, max_age_days: float, *, now: float | None = None) -> bool:
    age = index_age_days(path, now=now)
    return age is not None and age > max_age_days
