"""ccd status command - show index location, size and freshness."""

import json
from pathlib import Path

import click
from rich.markup import escape

from ccd.cli.utils import get_config
from ccd.core.errors import IndexLoadError
from ccd.core.progress import get_console
from ccd.index.builder import index_age_days, load_index


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def status_command(ctx: click.Context, as_json: bool) -> None:
    """Show where the index lives, how many entries it has and how old it is."""
    config = get_config(ctx)
    index_path = Path(config.index.index_path)

    info: dict[str, object] = {
        "index_path": str(index_path),
        "root": config.index.root,
        "exists": index_path.exists(),
    }

    load_error: IndexLoadError | None = None
    if index_path.exists():
        try:
            index = load_index(index_path)
        except IndexLoadError as e:
            load_error = e
            info["error"] = e.to_dict()
        else:
            age = index_age_days(index_path)
            info["entries"] = len(index)
            info["keyworded_entries"] = sum(1 for e in index if e.keywords)
            info["age_days"] = round(age, 2) if age is not None else None
            info["stale"] = age is not None and age > config.index.stale_after_days

    if as_json:
        click.echo(json.dumps(info, sort_keys=True))
        if load_error is not None:
            ctx.exit(1)
        return

    console = get_console()
    console.print(f"Index: {index_path}", highlight=False)
    console.print(f"Root: {config.index.root}", highlight=False)
    if not info["exists"]:
        console.print("[yellow]Index not built yet.[/yellow] Run 'ccd rebuild'.")
        return
    if load_error is not None:
        console.print(f"[red]{escape(load_error.message)}[/red]", highlight=False)
        ctx.exit(1)

    console.print(f"Entries: {info['entries']} ({info['keyworded_entries']} with keywords)")
    stale_note = " [yellow](stale, run 'ccd rebuild')[/yellow]" if info["stale"] else ""
    console.print(f"Age: {info['age_days']} days{stale_note}")
