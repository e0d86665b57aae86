"""ccd shell-init command - print the shell function that changes directory.

A child process cannot change its parent's working directory, so navigation
goes through a small shell function: ``ccd go`` prints the target and the
function does the ``cd``.
"""

import click

# Subcommands and flags the shell function hands straight to the executable
PASSTHROUGH_WORDS = (
    "rebuild",
    "find",
    "list",
    "status",
    "init",
    "edit-keywords",
    "shell-init",
    "go",
    "--help",
    "-h",
    "--version",
)

_FUNCTION_TEMPLATE = """\
{name}() {{
    case "$1" in
        "")
            command ccd --help
            return $?
            ;;
        {passthrough})
            command ccd "$@"
            return $?
            ;;
    esac
    local target
    target="$(command ccd go "$@")" || return $?
    if [ -n "$target" ]; then
        cd -- "$target"
    fi
}}
"""


def render_shell_function(name: str = "ccd") -> str:
    """Shell function for bash/zsh wrapping ``ccd go``."""
    return _FUNCTION_TEMPLATE.format(name=name, passthrough="|".join(PASSTHROUGH_WORDS))


@click.command()
@click.option(
    "--name",
    default="ccd",
    show_default=True,
    help="Name of the shell function to define",
)
def shell_init_command(name: str) -> None:
    """Print a bash/zsh function that jumps to the chosen directory.

    Add this to your shell rc file:

        eval "$(ccd shell-init)"
    """
    if not name.replace("_", "").replace("-", "").isalnum():
        raise click.BadParameter("must be letters, digits, '-' or '_'", param_hint="--name")
    click.echo(render_shell_function(name), nl=False)
