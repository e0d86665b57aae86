"""ccd CLI - ccd command."""

from pathlib import Path

import click

from ccd import __version__
from ccd.cli.edit import edit_keywords_command
from ccd.cli.find import find_command, list_command
from ccd.cli.go import go_command
from ccd.cli.init import init_command
from ccd.cli.rebuild import rebuild_command
from ccd.cli.shell import shell_init_command
from ccd.cli.status import status_command
from ccd.config.loader import load_config
from ccd.core.errors import ConfigError
from ccd.core.logging import configure_logging, set_run_id


@click.group()
@click.version_option(version=__version__, prog_name="ccd")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    envvar="CCD_CONFIG",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ~/.config/ccd/config.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Path | None) -> None:
    """ccd - jump to a directory by name fragment or keyword."""
    ctx.ensure_object(dict)
    try:
        config = load_config(config_path)
    except ConfigError as e:
        raise click.ClickException(e.message) from e

    configure_logging(config.logging, level="DEBUG" if verbose else None)
    set_run_id()

    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = config
    ctx.obj["config_path"] = config_path


cli.add_command(rebuild_command, name="rebuild")
cli.add_command(find_command, name="find")
cli.add_command(go_command, name="go")
cli.add_command(list_command, name="list")
cli.add_command(edit_keywords_command, name="edit-keywords")
cli.add_command(status_command, name="status")
cli.add_command(init_command, name="init")
cli.add_command(shell_init_command, name="shell-init")


if __name__ == "__main__":
    cli()
