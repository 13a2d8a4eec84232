"""statelint resolve command - show what each class attribute resolves to."""

import json
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from statelint.config import StatelintConfig, load_config
from statelint.core.errors import ConfigError, ResolutionError
from statelint.core.logging import configure_logging
from statelint.markup.jsx import ClassAttribute, extract_class_attributes
from statelint.resolver.imports import ImportCache


def load_run_config(ctx: click.Context, config_path: Path | None, no_imports: bool) -> StatelintConfig:
    """Load the project config and apply it to logging.

    ``-v`` on the group forces DEBUG over the configured level.
    """
    try:
        config = load_config(Path.cwd(), config_path=config_path)
    except ConfigError as e:
        raise click.ClickException(e.message) from e
    if no_imports:
        config.resolver = config.resolver.model_copy(update={"follow_imports": False})
    if (ctx.obj or {}).get("verbose"):
        config.logging = config.logging.model_copy(update={"level": "DEBUG"})
    configure_logging(config=config.logging)
    return config


def read_component(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise click.ClickException(f"Cannot read {path}: {e}") from e


def resolve_file(path: Path, config: StatelintConfig, cache: ImportCache) -> list[ClassAttribute]:
    """Extract and resolve the class attributes of one component file."""
    resolver = config.resolver
    return extract_class_attributes(
        read_component(path),
        str(path.resolve()),
        follow_imports=resolver.follow_imports,
        cache=cache,
        attribute_names=resolver.attribute_names,
        extensions=tuple(resolver.extensions),
        index_basename=resolver.index_basename,
    )


def _print_attributes(console: Console, path: Path, attributes: list[ClassAttribute]) -> None:
    for attr in attributes:
        result = attr.result
        marker = "[green]✓[/green]" if result.fully_resolved else "[yellow]?[/yellow]"
        console.print(
            f"{marker} {escape(str(path))}:{attr.line} "
            f"[cyan]<{escape(attr.tag)}>[/cyan] {attr.attribute}: {escape(repr(result.text))}"
        )
        for fragment in result.unresolved_fragments:
            console.print(f"    unresolved: {escape(fragment)}")


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
def resolve_command(
    ctx: click.Context,
    paths: tuple[Path, ...],
    as_json: bool,
    no_imports: bool,
    config_path: Path | None,
) -> None:
    """Resolve the class attributes of JSX/TSX component files.

    PATHS are component files (.jsx, .tsx, .js, .ts).
    """
    config = load_run_config(ctx, config_path, no_imports)

    # A fresh cache per run: stale entries would serve outdated bindings
    cache = ImportCache()
    console = Console(highlight=False)
    report: list[dict[str, object]] = []

    for path in paths:
        try:
            attributes = resolve_file(path, config, cache)
        except ResolutionError as e:
            raise click.ClickException(e.message) from e

        if as_json:
            report.extend({"path": str(path), **attr.to_dict()} for attr in attributes)
        else:
            _print_attributes(console, path, attributes)

    if as_json:
        click.echo(json.dumps(report, indent=2))
