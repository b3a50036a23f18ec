from __future__ import annotations

import asyncio
from typing import Any, Optional

import typer
from pydantic import ValidationError

from .config import StoreConfig
from .logging_setup import setup_logging
from .runner import OperationRunner
from .seed import seed_store
from .types import StoreError

app = typer.Typer(
    add_completion=False,
    help="Run the bookstore MongoDB queries (default) or load sample books.",
)

URI_OPTION = typer.Option(None, "--uri", help="MongoDB connection URI (env MONGO_URL).")
DATABASE_OPTION = typer.Option(None, "--database", help="Database name (env MONGO_DB_NAME).")
COLLECTION_OPTION = typer.Option(None, "--collection", help="Collection name (env MONGO_COLLECTION).")
STRICT_COUNTS_OPTION = typer.Option(
    None,
    "--strict-counts/--no-strict-counts",
    help="Treat an update or delete that touches no document as an error.",
)
LOG_LEVEL_OPTION = typer.Option("INFO", "--log-level", help="Log level for stderr.")


def _config(**overrides: Any) -> StoreConfig:
    try:
        return StoreConfig.from_env(**overrides)
    except ValidationError as e:
        typer.echo(f"Invalid configuration: {e}", err=True)
        raise typer.Exit(code=2)


def _run(config: StoreConfig) -> None:
    # Failures are reported by the runner; the exit status stays 0.
    asyncio.run(OperationRunner(config).run())


@app.callback(invoke_without_command=True)
def default(
    ctx: typer.Context,
    uri: Optional[str] = URI_OPTION,
    database: Optional[str] = DATABASE_OPTION,
    collection: Optional[str] = COLLECTION_OPTION,
    strict_counts: Optional[bool] = STRICT_COUNTS_OPTION,
    log_level: str = LOG_LEVEL_OPTION,
) -> None:
    if ctx.invoked_subcommand is None:
        setup_logging(log_level)
        _run(
            _config(
                uri=uri,
                database_name=database,
                collection_name=collection,
                strict_counts=strict_counts,
            )
        )


@app.command("run")
def run(
    uri: Optional[str] = URI_OPTION,
    database: Optional[str] = DATABASE_OPTION,
    collection: Optional[str] = COLLECTION_OPTION,
    strict_counts: Optional[bool] = STRICT_COUNTS_OPTION,
    log_level: str = LOG_LEVEL_OPTION,
) -> None:
    """Run the query sequence against the collection."""
    setup_logging(log_level)
    _run(
        _config(
            uri=uri,
            database_name=database,
            collection_name=collection,
            strict_counts=strict_counts,
        )
    )


@app.command("seed")
def seed_command(
    uri: Optional[str] = URI_OPTION,
    database: Optional[str] = DATABASE_OPTION,
    collection: Optional[str] = COLLECTION_OPTION,
    log_level: str = LOG_LEVEL_OPTION,
) -> None:
    """Drop the collection and load the sample books."""
    setup_logging(log_level)
    config = _config(uri=uri, database_name=database, collection_name=collection)
    try:
        count = asyncio.run(seed_store(config))
    except StoreError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Inserted {count} books into {config.namespace}")


def main() -> None:
    app()
