"""Metadata CLI commands."""

import click

from recordforge.cli.common import load_registry


@click.group()
def metadata():
    """Metadata commands."""
    pass


@metadata.command()
def validate():
    """Load and validate every entity definition."""
    registry = load_registry()

    schemas = registry.schemas
    click.echo(f"Loaded {len(schemas)} entities:")
    for name in sorted(schemas):
        schema = schemas[name]
        click.echo(
            f"  ✓ {name} ({len(schema.fields)} fields, "
            f"{len(schema.display_fields)} display-only, table: {schema.table})"
        )

    click.echo(click.style("\nAll metadata is valid.", fg="green", bold=True))
