"""Entity table and form CLI commands."""

import json

import click

from recordforge.cli.common import load_registry, open_repository
from recordforge.engine import EntityTableEngine, RecordNotFoundError
from recordforge.persistence import DataAccessError


def _engine_for(entity: str):
    registry = load_registry()
    try:
        schema = registry.get_schema(entity)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
    _, repository = open_repository()
    return EntityTableEngine(schema, repository, registry), repository


@click.group()
def entities():
    """Entity table and form commands."""
    pass


@entities.command("list")
@click.argument("entity")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the table model as JSON.")
def list_cmd(entity: str, as_json: bool):
    """Print the table for ENTITY in display order and default sort."""
    engine, repository = _engine_for(entity)
    try:
        outcome = engine.list_entities()
    finally:
        repository.close()

    if not outcome.success:
        click.echo(click.style(outcome.message or "Load failed", fg="red"), err=True)
        raise SystemExit(1)

    table = outcome.table
    if as_json:
        click.echo(json.dumps(table.to_dict(), indent=2, default=str))
        return

    labels = [c.label for c in table.columns]
    widths = [
        max([len(label)] + [len(row[i]) for row in table.rows])
        for i, label in enumerate(labels)
    ]
    click.echo("  ".join(label.ljust(w) for label, w in zip(labels, widths)))
    click.echo("  ".join("-" * w for w in widths))
    for row in table.rows:
        click.echo("  ".join(cell.ljust(w) for cell, w in zip(row, widths)))
    for warning in table.warnings:
        click.echo(click.style(warning, fg="yellow"), err=True)


@entities.command("form")
@click.argument("entity")
@click.option("--key", default=None, help="Open an edit form for this record.")
def form_cmd(entity: str, key: str | None):
    """Print the form-build request for ENTITY as JSON."""
    engine, repository = _engine_for(entity)
    try:
        session = engine.open_edit_form(key) if key else engine.open_add_form()
    except RecordNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
    except DataAccessError as e:
        click.echo(click.style(f"Error: {e.message}", fg="red"), err=True)
        raise SystemExit(1)
    finally:
        repository.close()

    click.echo(json.dumps(session.to_dict(), indent=2, default=str))
