"""statelint CLI."""

import click

from statelint.cli.elements import elements_command
from statelint.cli.resolve import resolve_command
from statelint.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="statelint")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """statelint - audit interactive state coverage of UI components."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    # Commands reconfigure from the project's logging section once it is loaded
    configure_logging(level="DEBUG" if verbose else "WARNING")


cli.add_command(resolve_command, name="resolve")
cli.add_command(elements_command, name="elements")


if __name__ == "__main__":
    cli()
