"""ccd find / ccd list commands - query the index without navigating."""

import click

from ccd.cli.utils import get_config, load_index_or_fail, warn_if_stale
from ccd.query.engine import parse_terms, query


@click.command()
@click.argument("terms", nargs=-1)
@click.option(
    "-k",
    "--keyword",
    "keyword_terms",
    multiple=True,
    help="Keyword-only term (same as writing #TERM). Repeatable.",
)
@click.option("--paths-only", is_flag=True, help="Print paths without keyword annotations")
@click.pass_context
def find_command(
    ctx: click.Context,
    terms: tuple[str, ...],
    keyword_terms: tuple[str, ...],
    paths_only: bool,
) -> None:
    """Print every indexed directory matching any of TERMS.

    A term matches when it is a case-insensitive substring of the path or of
    a keyword. Prefix a term with # to match keywords only. Exits 1 when
    nothing matches.
    """
    config = get_config(ctx)
    try:
        parsed = parse_terms(terms, keyword_terms)
    except ValueError as e:
        raise click.UsageError(str(e)) from e

    index = load_index_or_fail(config)
    warn_if_stale(config)

    matches = query(index, parsed)
    for entry in matches:
        click.echo(entry.path if paths_only else entry.to_line())
    if not matches:
        ctx.exit(1)


@click.command()
@click.option("--paths-only", is_flag=True, help="Print paths without keyword annotations")
@click.pass_context
def list_command(ctx: click.Context, paths_only: bool) -> None:
    """Print every indexed directory in index order."""
    config = get_config(ctx)
    index = load_index_or_fail(config)
    for entry in index:
        click.echo(entry.path if paths_only else entry.to_line())
