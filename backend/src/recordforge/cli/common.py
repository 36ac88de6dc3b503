"""Shared CLI helpers."""

import click

from recordforge.core.settings import resolve_base_path, resolve_metadata_path
from recordforge.hooks import register_builtin_hooks
from recordforge.metadata.loader import MetadataLoader
from recordforge.persistence import DatabaseConfig, create_repository
from recordforge.persistence.sql import SQLRepository
from recordforge.registry import FieldMetadataRegistry


def load_registry() -> FieldMetadataRegistry:
    """Load entity metadata, exiting with an error message if it is invalid."""
    metadata_path = resolve_metadata_path(resolve_base_path())
    if not metadata_path.exists():
        click.echo(f"Error: Metadata directory not found at {metadata_path}", err=True)
        raise SystemExit(1)

    loader = MetadataLoader(metadata_path)
    try:
        loader.load_all()
    except (ValueError, KeyError) as e:
        click.echo(click.style(f"Metadata is invalid: {e}", fg="red"), err=True)
        raise SystemExit(1)

    register_builtin_hooks()
    return FieldMetadataRegistry.from_loader(loader)


def open_repository() -> tuple[DatabaseConfig, SQLRepository]:
    config = DatabaseConfig.from_env(resolve_base_path())
    return config, create_repository(config)
