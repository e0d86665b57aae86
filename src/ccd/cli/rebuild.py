"""ccd rebuild command - rebuild the directory index."""

from pathlib import Path

import click

from ccd.cli.utils import get_config, report_diagnostics
from ccd.core.errors import IndexLoadError, TraversalError
from ccd.core.progress import pluralize, spinner, status
from ccd.index.ops import rebuild_index


@click.command()
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory to index (default: index.root from config, usually ~)",
)
@click.pass_context
def rebuild_command(ctx: click.Context, root: Path | None) -> None:
    """Rebuild the directory index and replace it atomically.

    Walks the traversal root, skipping ignored directories, folds every
    workspace (a directory holding a marker such as .git or package.json)
    into a single entry, and attaches keywords from per-directory keyword
    files.
    """
    config = get_config(ctx)
    display_root = root if root is not None else config.index.root

    try:
        with spinner(f"Indexing {display_root}"):
            result = rebuild_index(config, root=root)
    except TraversalError as e:
        raise click.ClickException(e.message) from e
    except IndexLoadError as e:
        raise click.ClickException(e.message) from e

    report_diagnostics(result.diagnostics)

    summary = (
        f"Indexed {pluralize(len(result.index), 'directory', 'directories')} "
        f"({pluralize(len(result.workspace_roots), 'workspace')}, "
        f"{pluralize(result.stats.directories_read, 'directory', 'directories')} scanned, "
        f"{result.stats.pruned} pruned) in {result.elapsed_s:.1f}s"
    )
    status(summary, style="success")
    if result.diagnostics:
        status(f"{pluralize(len(result.diagnostics), 'warning')}", style="warning")
    status(f"Index written to {result.index_path}", style="info")
