"""CLI utilities."""

from collections.abc import Sequence
from pathlib import Path

import click
from rich.markup import escape

from ccd.config.models import CcdConfig
from ccd.core.errors import IndexLoadError
from ccd.core.logging import get_logger
from ccd.core.progress import pluralize, status
from ccd.index.builder import index_age_days, load_index
from ccd.index.models import Diagnostic, Index

log = get_logger("cli")

# Diagnostics printed one per line before summarizing the rest
MAX_LISTED_DIAGNOSTICS = 10


def get_config(ctx: click.Context) -> CcdConfig:
    """Config loaded by the root group."""
    config = ctx.find_object(dict)
    if not config or "config" not in config:
        raise click.ClickException("Configuration not loaded")
    return config["config"]  # type: ignore[no-any-return]


def load_index_or_fail(config: CcdConfig) -> Index:
    """Load the index; a missing or unreadable file is fatal for the command."""
    index_path = Path(config.index.index_path)
    try:
        return load_index(index_path)
    except IndexLoadError as e:
        log.debug("index_load_failed", error=e.error_name, path=str(index_path))
        raise click.ClickException(e.message) from e


def warn_if_stale(config: CcdConfig) -> None:
    """Recommend a rebuild when the index is old. Never alters results."""
    index_path = Path(config.index.index_path)
    age = index_age_days(index_path)
    if age is not None and age > config.index.stale_after_days:
        log.debug("index_stale", path=str(index_path), age_days=round(age, 1))
        status(
            f"Index is {age:.0f} days old. Run 'ccd rebuild' to pick up new directories.",
            style="warning",
        )


def report_diagnostics(diagnostics: Sequence[Diagnostic]) -> None:
    """Print recovered per-item problems, capped to keep output short."""
    if not diagnostics:
        return
    for diagnostic in diagnostics[:MAX_LISTED_DIAGNOSTICS]:
        status(escape(diagnostic.message), style="warning")
    hidden = len(diagnostics) - MAX_LISTED_DIAGNOSTICS
    if hidden > 0:
        status(f"... and {pluralize(hidden, 'more warning')} (use -v for details)", style="warning")
