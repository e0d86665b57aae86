"""ccd go command - resolve terms to exactly one directory.

Prints the chosen path on stdout and nothing else; the shell function from
``ccd shell-init`` captures it and changes directory. On cancellation
nothing is printed and the exit status is 0, so the shell stays where it is.
"""

import click
from rich.markup import escape

from ccd.cli.utils import get_config, load_index_or_fail, warn_if_stale
from ccd.core.errors import NoMatchError
from ccd.core.progress import status
from ccd.query.engine import parse_terms, query
from ccd.query.selector import choose, detect_selector, disambiguate


@click.command()
@click.argument("terms", nargs=-1)
@click.option(
    "-k",
    "--keyword",
    "keyword_terms",
    multiple=True,
    help="Keyword-only term (same as writing #TERM). Repeatable.",
)
@click.pass_context
def go_command(ctx: click.Context, terms: tuple[str, ...], keyword_terms: tuple[str, ...]) -> None:
    """Print the single directory matching TERMS.

    With several matches an interactive selector (fzf, or a terminal prompt)
    is shown; without one the shallowest match is used.
    """
    config = get_config(ctx)
    try:
        parsed = parse_terms(terms, keyword_terms)
    except ValueError as e:
        raise click.UsageError(str(e)) from e

    selector = detect_selector(config.selector)
    index = load_index_or_fail(config)
    warn_if_stale(config)

    outcome = disambiguate(query(index, parsed))
    try:
        chosen = choose(outcome, selector, [str(t) for t in parsed])
    except NoMatchError as e:
        status(escape(e.message), style="error")
        ctx.exit(1)

    if chosen is not None:
        click.echo(chosen)
