"""RecordForge CLI entry point."""

import click

from recordforge.core.settings import configure_logging, log_level, server_port


@click.group()
def cli():
    """RecordForge - metadata-driven entity table/form engine CLI."""
    configure_logging()


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option(
    "--port",
    default=server_port,
    show_default="8000 or RECORDFORGE_PORT",
    type=int,
)
@click.option("--reload", is_flag=True, default=False, help="Reload on code changes.")
def serve(host: str, port: int, reload: bool):
    """Run the API server."""
    import uvicorn

    uvicorn.run(
        "recordforge.api.app:app",
        host=host,
        port=port,
        reload=reload,
        log_level=log_level(),
    )


# Register subcommand groups
from recordforge.cli.db_cmd import db  # noqa: E402
from recordforge.cli.entities_cmd import entities  # noqa: E402
from recordforge.cli.metadata_cmd import metadata  # noqa: E402

cli.add_command(metadata)
cli.add_command(entities)
cli.add_command(db)
