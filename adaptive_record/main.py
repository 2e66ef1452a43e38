from __future__ import annotations

import sys
from pathlib import Path
from typing import NoReturn, Optional

import typer

from adaptive_record.config import get_settings
from adaptive_record.domain.record_type import RecordType
from adaptive_record.errors import AdaptiveRecordError
from adaptive_record.infrastructure.postgres import PostgresRecordPersistence
from adaptive_record.reporter import print_records, print_structure
from adaptive_record.sql.generator import SqlDialect, SqlGenerator
from adaptive_record.store import RecordStore
from adaptive_record.utils.logging import configure_logging

app = typer.Typer(help="Adaptive Record CLI: schema-driven record types and SQL.")

SchemaArgument = typer.Argument(
    ...,
    exists=True,
    dir_okay=False,
    readable=True,
    help="JSON file holding the array of field definitions.",
)


def _load_store(schema_path: Path, name: Optional[str], table: Optional[str] = None) -> RecordStore:
    store = RecordStore(table_name=table or get_settings().record_table)
    store.create_type(schema_path.read_text(encoding="utf-8"), name=name or schema_path.stem)
    return store


def _fail(exc: AdaptiveRecordError) -> NoReturn:
    typer.echo(f"{type(exc).__name__}: {exc}", err=True)
    raise typer.Exit(code=1)


@app.callback()
def _setup() -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"table={settings.record_table} dialect={settings.sql_dialect} env={settings.app_env}"
    )


@app.command()
def inspect(
    schema: Path = SchemaArgument,
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Record type name (default: file stem)."),
    pretty: bool = typer.Option(False, "--pretty", help="Render as a rich table."),
) -> None:
    """
    Validate a schema and describe the record type it produces.
    """
    try:
        store = _load_store(schema, name)
    except AdaptiveRecordError as exc:
        _fail(exc)
    if pretty:
        print_structure(store.record_type)  # type: ignore[arg-type]
    else:
        typer.echo(store.inspect_structure(), nl=False)


@app.command()
def sql(
    schema: Path = SchemaArgument,
    table: Optional[str] = typer.Option(None, "--table", "-t", help="Target table (default from settings)."),
    dialect: Optional[SqlDialect] = typer.Option(None, "--dialect", "-d", help="SQL dialect."),
) -> None:
    """
    Print the CREATE/SELECT/INSERT/UPDATE/DELETE statements for a schema.
    """
    settings = get_settings()
    try:
        store = _load_store(schema, None)
        generator = SqlGenerator(
            store.record_type,
            table or settings.record_table,
            dialect=dialect or settings.sql_dialect,
        )
        statements = [
            generator.generate_create_table_query(),
            generator.generate_select_query(),
            generator.generate_insert_query(),
            generator.generate_update_query(),
            generator.generate_delete_query(),
        ]
    except AdaptiveRecordError as exc:
        _fail(exc)
    for statement in statements:
        typer.echo(f"{statement};")


def _persistence(record_type: RecordType, table: Optional[str]) -> PostgresRecordPersistence:
    return PostgresRecordPersistence(record_type, table_name=table)


@app.command("init-table")
def init_table(
    schema: Path = SchemaArgument,
    table: Optional[str] = typer.Option(None, "--table", "-t", help="Target table (default from settings)."),
) -> None:
    """
    Create the PostgreSQL table for a schema if it does not exist.
    """
    try:
        store = _load_store(schema, None, table)
    except AdaptiveRecordError as exc:
        _fail(exc)
    persistence = _persistence(store.record_type, table)  # type: ignore[arg-type]
    persistence.ensure_table()
    typer.echo(f"Table '{persistence.table_name}' is ready.")


@app.command()
def show(
    schema: Path = SchemaArgument,
    table: Optional[str] = typer.Option(None, "--table", "-t", help="Source table (default from settings)."),
) -> None:
    """
    Fetch all rows of a PostgreSQL table through the record store and print them.
    """
    try:
        store = _load_store(schema, None, table)
        store.bind(_persistence(store.record_type, table))  # type: ignore[arg-type]
        store.fetch_all()
    except AdaptiveRecordError as exc:
        _fail(exc)
    print_records(store.get_table())


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
