"""statelint elements command - list interactive elements and their states."""

import json
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from statelint.cli.resolve import load_run_config, read_component
from statelint.core.errors import ResolutionError
from statelint.markup.jsx import InteractiveElement, extract_interactive_elements
from statelint.resolver.imports import ImportCache


def _flags(element: InteractiveElement) -> list[str]:
    flags = []
    if element.is_content_region:
        flags.append("content-region")
    if element.can_be_disabled:
        flags.append("conditional-disabled" if element.has_conditional_disabled else "disabled")
    if element.can_be_invalid:
        flags.append("validated")
    if element.has_placeholder:
        flags.append("placeholder")
    if element.is_radio_or_checkbox:
        flags.append("radio/checkbox")
    return flags


@click.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--no-imports", is_flag=True, help="Do not read imported modules")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to a statelint.yaml file",
)
@click.pass_context
def elements_command(
    ctx: click.Context,
    paths: tuple[Path, ...],
    as_json: bool,
    no_imports: bool,
    config_path: Path | None,
) -> None:
    """List the interactive elements of JSX/TSX component files.

    Shows each element's state variants (hover, focus, ...) found in its
    resolved class list.
    """
    config = load_run_config(ctx, config_path, no_imports)
    resolver = config.resolver
    cache = ImportCache()
    console = Console(highlight=False)
    report: list[dict[str, object]] = []

    for path in paths:
        try:
            elements = extract_interactive_elements(
                read_component(path),
                str(path.resolve()),
                follow_imports=resolver.follow_imports,
                cache=cache,
                attribute_names=resolver.attribute_names,
                extensions=tuple(resolver.extensions),
                index_basename=resolver.index_basename,
            )
        except ResolutionError as e:
            raise click.ClickException(e.message) from e

        if as_json:
            report.extend({"path": str(path), **element.to_dict()} for element in elements)
            continue
        for element in elements:
            states = ", ".join(element.states) or "[dim]none[/dim]"
            console.print(f"{escape(str(path))}:{element.line} [cyan]{escape(element.element_type)}[/cyan] {states}")
            flags = _flags(element)
            if flags:
                console.print(f"    {escape(' '.join(flags))}")
            for fragment in element.class_name.unresolved_fragments:
                console.print(f"    unresolved: {escape(fragment)}")

    if as_json:
        click.echo(json.dumps(report, indent=2))
