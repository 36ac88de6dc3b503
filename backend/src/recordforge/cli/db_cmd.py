"""Database CLI commands."""

import click

from recordforge.cli.common import load_registry, open_repository
from recordforge.persistence import DataAccessError


@click.group()
def db():
    """Database commands."""
    pass


@db.command()
def init():
    """Create tables for every entity that doesn't have one yet."""
    registry = load_registry()
    config, repository = open_repository()
    try:
        repository.initialize_entities(list(registry.schemas.values()))
    except DataAccessError as e:
        click.echo(click.style(f"Error: {e.message}", fg="red"), err=True)
        raise SystemExit(1)
    finally:
        repository.close()

    click.echo(f"Initialized {len(registry.schemas)} tables at {config.url}")
