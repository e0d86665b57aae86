"""ccd edit-keywords command - edit a directory's keyword file."""

from pathlib import Path

import click
from rich.markup import escape

from ccd.cli.utils import get_config
from ccd.core.progress import pluralize, status
from ccd.index.keywords import KeywordLoader, parse_keyword_bytes
from ccd.index.traverser import normalize_root

KEYWORD_FILE_HEADER = """\
# ccd keywords for {directory}
# One keyword per line. Lines starting with '#' are ignored.
# Search with: ccd find '#keyword'
"""


@click.command()
@click.argument(
    "directory",
    default=".",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.pass_context
def edit_keywords_command(ctx: click.Context, directory: Path) -> None:
    """Open DIRECTORY's keyword file in an editor, creating it if needed.

    The editor is taken from the config 'editor' setting, then $VISUAL,
    then $EDITOR. Changes take effect on the next 'ccd rebuild'.
    """
    config = get_config(ctx)
    target = normalize_root(directory)
    loader = KeywordLoader(config.index.keyword_file)
    keyword_path = loader.keyword_path(target)

    if not keyword_path.exists():
        try:
            keyword_path.write_text(KEYWORD_FILE_HEADER.format(directory=target))
        except OSError as e:
            raise click.ClickException(
                f"Cannot create {keyword_path}: {e.strerror or e}"
            ) from e
        status(f"Created {keyword_path}", style="info")

    click.edit(filename=str(keyword_path), editor=config.editor)

    try:
        result = parse_keyword_bytes(keyword_path.read_bytes(), str(keyword_path))
    except OSError as e:
        raise click.ClickException(f"Cannot read {keyword_path}: {e.strerror or e}") from e

    for error in result.errors:
        status(escape(error.message), style="warning")
    status(
        f"{pluralize(len(result.keywords), 'keyword')} for {target}. "
        "Run 'ccd rebuild' to update the index.",
        style="success",
    )
