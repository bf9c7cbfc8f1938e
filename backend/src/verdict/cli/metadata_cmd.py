"""Metadata CLI commands."""

from pathlib import Path

import click

from verdict.errors import MetadataError
from verdict.integration import ruleset_from_entity
from verdict.metadata.loader import MetadataLoader
from verdict.validation import register_builtin_constraints


def resolve_metadata_path(path: Path | None) -> Path:
    """Explicit --path, else <repo>/metadata relative to cwd."""
    if path is not None:
        return path
    cwd = Path.cwd()
    base_path = cwd.parent if cwd.name == "backend" else cwd
    return base_path / "metadata"


def load_metadata(path: Path | None, exit_code: int = 1) -> MetadataLoader:
    """Load metadata or exit with ``exit_code`` and an error message."""
    metadata_path = resolve_metadata_path(path)
    if not metadata_path.exists():
        click.echo(f"Error: Metadata directory not found at {metadata_path}", err=True)
        raise SystemExit(exit_code)

    register_builtin_constraints()
    loader = MetadataLoader(metadata_path)
    try:
        loader.load_all()
    except MetadataError as e:
        click.echo(click.style(f"Metadata is invalid: {e}", fg="red"), err=True)
        raise SystemExit(exit_code)
    return loader


@click.group()
def metadata():
    """Metadata commands."""
    pass


@metadata.command()
@click.option(
    "--path",
    "metadata_path",
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Metadata directory (default: ./metadata).",
)
def validate(metadata_path: Path | None):
    """Load entity metadata and resolve every declared rule."""
    loader = load_metadata(metadata_path)

    entities = loader.list_entities()
    click.echo(f"Loaded {len(entities)} entities:")
    for name in sorted(entities):
        entity = loader.get_entity(name)
        try:
            ruleset = ruleset_from_entity(entity)
        except MetadataError as e:
            click.echo(click.style(f"  ✗ {name}: {e}", fg="red"))
            raise SystemExit(1)
        click.echo(
            f"  ✓ {name} ({len(entity.fields)} fields, {len(ruleset)} rules)"
        )
        for field_name, constraint_names in ruleset.describe().items():
            click.echo(f"      {field_name}: {', '.join(constraint_names)}")

    click.echo(click.style("\nAll metadata is valid.", fg="green", bold=True))
