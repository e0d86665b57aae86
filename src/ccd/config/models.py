"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (CCD__SECTION__KEY)
3. YAML config (~/.config/ccd/config.yaml, or --config / CCD_CONFIG)
4. Built-in defaults (this file)

Environment Variable Format:
    CCD__<SECTION>__<KEY>=<VALUE>

Examples:
    CCD__LOGGING__LEVEL=DEBUG
    CCD__INDEX__ROOT=/srv/work
    CCD__INDEX__STALE_AFTER_DAYS=10
    CCD__SELECTOR__MODE=first
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
SelectorMode = Literal["auto", "fzf", "prompt", "first"]

CONFIG_DIR = Path("~/.config/ccd")
CACHE_DIR = Path("~/.cache/ccd")


def _expand(value: str) -> str:
    return str(Path(value).expanduser())


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        CCD__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. WARNING surfaces skipped directories and "
        "keyword problems; DEBUG traces every directory visited.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class IndexConfig(BaseModel):
    """Index configuration.

    Env vars:
        CCD__INDEX__ROOT: Directory the rebuild starts from (default: ~)
        CCD__INDEX__INDEX_PATH: Where the index file lives
        CCD__INDEX__KEYWORD_FILE: Per-directory keyword file name
        CCD__INDEX__STALE_AFTER_DAYS: Age after which queries warn
    """

    model_config = ConfigDict(validate_default=True)

    root: str = Field(
        default="~",
        description="Traversal root for 'ccd rebuild'.",
    )
    index_path: str = Field(
        default=str(CACHE_DIR / "index"),
        description="Index file location. Replaced atomically on every rebuild.",
    )
    keyword_file: str = Field(
        default=".ccd_keywords",
        description="Name of the optional per-directory keyword file.",
    )
    stale_after_days: float = Field(
        default=5.0,
        description="Queries warn when the index is older than this. Results are unaffected.",
    )

    @field_validator("root", "index_path")
    @classmethod
    def expand_user(cls, v: str) -> str:
        return _expand(v)

    @field_validator("keyword_file")
    @classmethod
    def validate_keyword_file(cls, v: str) -> str:
        if not v or "/" in v:
            raise ValueError(f"Keyword file must be a plain file name, got {v!r}")
        return v

    @field_validator("stale_after_days")
    @classmethod
    def validate_stale_after_days(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"stale_after_days must be positive, got {v}")
        return v


class PatternsConfig(BaseModel):
    """Ignore / marker pattern file locations.

    Env vars:
        CCD__PATTERNS__IGNORE_FILE: Ignore regex file
        CCD__PATTERNS__MARKERS_FILE: Workspace marker name file
    """

    model_config = ConfigDict(validate_default=True)

    ignore_file: str = Field(
        default=str(CONFIG_DIR / "ignore"),
        description="One regex per line. Absent file: built-in baseline.",
    )
    markers_file: str = Field(
        default=str(CONFIG_DIR / "markers"),
        description="One exact marker name per line. Absent file: built-in baseline.",
    )

    @field_validator("ignore_file", "markers_file")
    @classmethod
    def expand_user(cls, v: str) -> str:
        return _expand(v)


class SelectorConfig(BaseModel):
    """Interactive selection of ambiguous matches.

    Env vars:
        CCD__SELECTOR__MODE: auto, fzf, prompt or first
    """

    mode: SelectorMode = Field(
        default="auto",
        description="auto picks fzf when installed, else a terminal prompt when "
        "stdin is a TTY, else the shallowest match.",
    )
    fzf_options: list[str] = Field(
        default_factory=lambda: ["--height=40%", "--reverse", "--no-multi"],
        description="Extra arguments passed to fzf.",
    )


class CcdConfig(BaseModel):
    """Root configuration for ccd."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    index: IndexConfig = Field(default_factory=IndexConfig)
    patterns: PatternsConfig = Field(default_factory=PatternsConfig)
    selector: SelectorConfig = Field(default_factory=SelectorConfig)
    editor: str | None = Field(
        default=None,
        description="Editor command for 'ccd edit-keywords'. Default: $VISUAL / $EDITOR.",
    )
