"""ccd init command - write starter config, ignore and marker files."""

from pathlib import Path

import click

from ccd.cli.utils import get_config
from ccd.config.loader import GLOBAL_CONFIG_PATH, write_default_config
from ccd.core.excludes import generate_ignore_template, generate_markers_template
from ccd.core.progress import get_console, status


def _write_if_absent(path: Path, content: str, *, force: bool) -> bool:
    """Write content unless the file exists; returns True if written."""
    if path.exists() and not force:
        status(f"Exists, skipped: {path}", style="info")
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    status(f"Wrote {path}", style="success")
    return True


@click.command()
@click.option("--force", "-f", is_flag=True, help="Overwrite existing files")
@click.pass_context
def init_command(ctx: click.Context, force: bool) -> None:
    """Create the config file plus editable ignore and marker lists.

    Existing files are left alone unless --force is given. Patterns in the
    written files are the built-in defaults, ready to extend.
    """
    config = get_config(ctx)
    config_path: Path = ctx.obj.get("config_path") or GLOBAL_CONFIG_PATH

    written = 0
    try:
        if config_path.exists() and not force:
            status(f"Exists, skipped: {config_path}", style="info")
        else:
            write_default_config(config_path, config)
            status(f"Wrote {config_path}", style="success")
            written += 1

        written += _write_if_absent(
            Path(config.patterns.ignore_file), generate_ignore_template(), force=force
        )
        written += _write_if_absent(
            Path(config.patterns.markers_file), generate_markers_template(), force=force
        )
    except OSError as e:
        raise click.ClickException(f"Cannot write {e.filename}: {e.strerror or e}") from e

    get_console().print()
    if written:
        status("Next: run 'ccd rebuild', then add 'eval \"$(ccd shell-init)\"' to your shell rc")
    else:
        status("Nothing written. Use --force to overwrite.", style="info")
