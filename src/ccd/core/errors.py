"""ccd error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Index / traversal
- 4xxx: Keywords
- 5xxx: Query
- 6xxx: Selector
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_INVALID_PATTERN = 2003
    CONFIG_UNREADABLE = 2004

    # Index / traversal (3xxx)
    TRAVERSAL_UNREADABLE_DIR = 3001
    TRAVERSAL_ROOT_INACCESSIBLE = 3002
    INDEX_NOT_FOUND = 3003
    INDEX_UNREADABLE = 3004
    INDEX_MALFORMED_LINE = 3005
    INDEX_WRITE_FAILED = 3006
    TRAVERSAL_UNSTORABLE_NAME = 3007

    # Keywords (4xxx)
    KEYWORD_MALFORMED_LINE = 4001
    KEYWORD_INVALID_CHARS = 4002
    KEYWORD_UNREADABLE = 4003

    # Query (5xxx)
    QUERY_NO_MATCH = 5001

    # Selector (6xxx)
    SELECTOR_UNAVAILABLE = 6001


@dataclass(frozen=True, slots=True)
class CcdError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(CcdError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def invalid_pattern(cls, path: str, line_no: int, pattern: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_PATTERN,
            message=f"Invalid ignore pattern at {path}:{line_no} ({pattern!r}): {reason}",
            details={"path": path, "line": line_no, "pattern": pattern, "reason": reason},
        )

    @classmethod
    def unreadable(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_UNREADABLE,
            message=f"Cannot read config file {path}: {reason}",
            details={"path": path, "reason": reason},
        )


class TraversalError(CcdError):
    """Filesystem traversal errors."""

    @classmethod
    def unreadable_dir(cls, path: str, reason: str) -> "TraversalError":
        return cls(
            code=ErrorCode.TRAVERSAL_UNREADABLE_DIR,
            message=f"Skipping unreadable directory {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def root_inaccessible(cls, path: str, reason: str) -> "TraversalError":
        return cls(
            code=ErrorCode.TRAVERSAL_ROOT_INACCESSIBLE,
            message=f"Traversal root is not accessible: {path} ({reason})",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def unstorable_name(cls, path: str, reason: str) -> "TraversalError":
        return cls(
            code=ErrorCode.TRAVERSAL_UNSTORABLE_NAME,
            message=f"Skipping directory that cannot be stored in the index {path}: {reason}",
            details={"path": path, "reason": reason},
        )


class KeywordParseError(CcdError):
    """Per-file keyword problems. Always recovered from."""

    @classmethod
    def malformed_line(cls, path: str, line_no: int, reason: str) -> "KeywordParseError":
        return cls(
            code=ErrorCode.KEYWORD_MALFORMED_LINE,
            message=f"Skipping keyword line {path}:{line_no}: {reason}",
            details={"path": path, "line": line_no, "reason": reason},
        )

    @classmethod
    def invalid_chars(cls, path: str, line_no: int, keyword: str) -> "KeywordParseError":
        return cls(
            code=ErrorCode.KEYWORD_INVALID_CHARS,
            message=f"Keyword {keyword!r} at {path}:{line_no} contains characters "
            "outside [a-z0-9_-]",
            details={"path": path, "line": line_no, "keyword": keyword},
        )

    @classmethod
    def unreadable(cls, path: str, reason: str) -> "KeywordParseError":
        return cls(
            code=ErrorCode.KEYWORD_UNREADABLE,
            message=f"Cannot read keyword file {path}: {reason}",
            details={"path": path, "reason": reason},
        )


class IndexLoadError(CcdError):
    """Persisted index problems."""

    @classmethod
    def not_found(cls, path: str) -> "IndexLoadError":
        return cls(
            code=ErrorCode.INDEX_NOT_FOUND,
            message=f"Index not found at {path}. Run 'ccd rebuild' first.",
            details={"path": path},
        )

    @classmethod
    def unreadable(cls, path: str, reason: str) -> "IndexLoadError":
        return cls(
            code=ErrorCode.INDEX_UNREADABLE,
            message=f"Cannot read index at {path}: {reason}. Run 'ccd rebuild'.",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def malformed_line(cls, path: str, line_no: int) -> "IndexLoadError":
        return cls(
            code=ErrorCode.INDEX_MALFORMED_LINE,
            message=f"Skipping malformed index line {path}:{line_no}",
            details={"path": path, "line": line_no},
        )

    @classmethod
    def write_failed(cls, path: str, reason: str) -> "IndexLoadError":
        return cls(
            code=ErrorCode.INDEX_WRITE_FAILED,
            message=f"Failed to write index to {path}: {reason}",
            details={"path": path, "reason": reason},
        )


class NoMatchError(CcdError):
    """Query produced no matches."""

    @classmethod
    def for_terms(cls, terms: list[str]) -> "NoMatchError":
        joined = " ".join(terms)
        return cls(
            code=ErrorCode.QUERY_NO_MATCH,
            message=f"No directory matches '{joined}'. "
            "If it was created recently, run 'ccd rebuild'.",
            details={"terms": terms},
        )


class SelectorUnavailableError(CcdError):
    """Interactive selector is missing or failed to start."""

    @classmethod
    def missing(cls, name: str, reason: str) -> "SelectorUnavailableError":
        return cls(
            code=ErrorCode.SELECTOR_UNAVAILABLE,
            message=f"Interactive selector '{name}' unavailable: {reason}",
            details={"selector": name, "reason": reason},
        )

