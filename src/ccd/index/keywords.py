"""Per-directory keyword files.

Format: one keyword per line; blank lines and lines whose first
non-whitespace character is ``#`` are comments. Keywords are lowercased on
ingestion. A keyword with characters outside ``[a-z0-9_-]`` is kept but
reported; a line that cannot be decoded or holds more than one token is
skipped and reported. Loading never fails the build.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from ccd.core.errors import KeywordParseError
from ccd.core.logging import get_logger
from ccd.index.models import Diagnostic

log = get_logger("keywords")

DEFAULT_KEYWORD_FILE = ".ccd_keywords"

_VALID_KEYWORD = re.compile(r"[a-z0-9_-]+")


@dataclass
class KeywordParseResult:
    keywords: frozenset[str]
    errors: list[KeywordParseError] = field(default_factory=list)


def parse_keyword_bytes(data: bytes, source: str) -> KeywordParseResult:
    """Parse keyword file content. ``source`` is only used in messages."""
    keywords: set[str] = set()
    errors: list[KeywordParseError] = []

    for line_no, raw in enumerate(data.splitlines(), start=1):
        try:
            text = raw.decode("utf-8-sig" if line_no == 1 else "utf-8")
        except UnicodeDecodeError:
            errors.append(KeywordParseError.malformed_line(source, line_no, "not valid UTF-8"))
            continue

        stripped = text.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if len(stripped.split()) > 1:
            errors.append(
                KeywordParseError.malformed_line(
                    source, line_no, "expected one keyword per line, found whitespace"
                )
            )
            continue

        keyword = stripped.lower()
        if not _VALID_KEYWORD.fullmatch(keyword):
            errors.append(KeywordParseError.invalid_chars(source, line_no, keyword))
        keywords.add(keyword)

    return KeywordParseResult(keywords=frozenset(keywords), errors=errors)


class KeywordLoader:
    """Reads the keyword file of one directory at a time.

    Problems are logged and collected in ``diagnostics``; ``load`` itself
    never raises.
    """

    def __init__(self, file_name: str = DEFAULT_KEYWORD_FILE) -> None:
        self.file_name = file_name
        self.diagnostics: list[Diagnostic] = []
        self.files_read = 0

    def keyword_path(self, directory: str | Path) -> Path:
        return Path(directory) / self.file_name

    def load(self, directory: str | Path) -> frozenset[str]:
        path = self.keyword_path(directory)
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            return frozenset()
        except OSError as e:
            if not path.exists() and not path.is_symlink():
                return frozenset()
            self._report(KeywordParseError.unreadable(str(path), e.strerror or str(e)))
            return frozenset()

        self.files_read += 1
        result = parse_keyword_bytes(data, str(path))
        for error in result.errors:
            self._report(error)
        if result.keywords:
            log.debug("keywords_loaded", path=str(path), count=len(result.keywords))
        return result.keywords

    def _report(self, error: KeywordParseError) -> None:
        log.info("keyword_problem", error=error.error_name, message=error.message)
        self.diagnostics.append(Diagnostic.from_error(error))
