"""
Sample data generation and loading script for Adaptive Record.

Implements deterministic pseudo-random row generation for any record schema,
CSV emission, and Postgres COPY loading into the table generated for it.
"""

from __future__ import annotations

import csv
import random
import sys
import tempfile
import time
from datetime import UTC, date, datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Dict

import typer

from adaptive_record.domain.models import SemanticType
from adaptive_record.domain.record_type import RecordField, RecordType
from adaptive_record.infrastructure.db_factory import sync_connection
from adaptive_record.infrastructure.postgres import PostgresRecordPersistence
from adaptive_record.store import RecordStore

app = typer.Typer(help="Generate sample rows for a record schema and load them into Postgres (CSV + COPY).")

_WORDS = ["alpha", "beta", "gamma", "delta", "ember", "fjord", "grove", "harbor"]
_EPOCH = date(1950, 1, 1)


def _value_generators(rng: random.Random) -> Dict[SemanticType, Callable[[], Any]]:
    return {
        SemanticType.INT32: lambda: rng.randint(0, 10_000),
        SemanticType.INT64: lambda: rng.randint(0, 1_000_000),
        SemanticType.STRING: lambda: f"{rng.choice(_WORDS)}-{rng.randint(1, 999)}",
        SemanticType.DATETIME: lambda: (_EPOCH + timedelta(days=rng.randint(0, 25_000))).isoformat(),
        SemanticType.DATETIME_OFFSET: lambda: datetime.now(UTC)
        .replace(microsecond=0)
        .isoformat(),
        SemanticType.BOOLEAN: lambda: "t" if rng.random() < 0.5 else "f",
        SemanticType.DECIMAL: lambda: f"{rng.uniform(1, 10_000):.2f}",
        SemanticType.DOUBLE: lambda: f"{rng.uniform(0, 1):.6f}",
    }


def _sample_value(field: RecordField, generators: Dict[SemanticType, Callable[[], Any]], rng: random.Random) -> Any:
    options = field.definition.options
    if field.definition.is_choice and options:
        return rng.choice(options)
    return generators[field.semantic_type]()


def _generate_rows_csv(
    record_type: RecordType, csv_path: Path, rows: int, batch_size: int, seed: int
) -> None:
    rng = random.Random(seed)
    generators = _value_generators(rng)
    fields = record_type.data_fields

    with csv_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow([field.name for field in fields])

        buffer: list[list[Any]] = []
        for _ in range(rows):
            buffer.append([_sample_value(field, generators, rng) for field in fields])
            if len(buffer) >= batch_size:
                writer.writerows(buffer)
                buffer.clear()
        if buffer:
            writer.writerows(buffer)


def _copy_into_db(persistence: PostgresRecordPersistence, csv_path: Path, dsn: str | None) -> None:
    generator = persistence.generator
    columns = ", ".join(generator.quote(field.name) for field in generator.record_type.data_fields)  # type: ignore[union-attr]
    with sync_connection(dsn) as conn:
        with conn.cursor() as cur:
            with cur.copy(
                f"COPY {generator.quote(persistence.table_name)} ({columns}) "
                "FROM STDIN WITH (FORMAT csv, HEADER TRUE)"
            ) as copy:
                with csv_path.open("r", encoding="utf-8") as f:
                    for line in f:
                        copy.write(line)


@app.command()
def main(
    schema: Path = typer.Argument(..., exists=True, dir_okay=False, help="Schema JSON file."),
    table: str | None = typer.Option(None, "--table", "-t", help="Target table (default from settings)."),
    rows: int = typer.Option(1_000, "--rows", "-r", help="Number of rows to generate."),
    batch_size: int = typer.Option(500, "--batch-size", "-b", help="Batch size for CSV buffering."),
    seed: int = typer.Option(42, "--seed", help="Deterministic RNG seed."),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Optional CSV output path (if omitted, a temp file will be used).",
    ),
    dsn: str | None = typer.Option(None, "--dsn", help="Optional DSN override for Postgres."),
    no_load: bool = typer.Option(False, "--no-load", help="Only generate CSV; skip loading into Postgres."),
) -> None:
    """
    Generate sample rows for a schema and optionally load them into Postgres using COPY.
    """
    store = RecordStore()
    record_type = store.create_type(schema.read_text(encoding="utf-8"), name=schema.stem)

    start = time.perf_counter()
    if output:
        csv_path = output
        csv_path.parent.mkdir(parents=True, exist_ok=True)
    else:
        tmpdir = Path(tempfile.mkdtemp(prefix="adaptive_record_csv_"))
        csv_path = tmpdir / f"{schema.stem}.csv"

    typer.echo(f"Generating {rows:,} rows -> {csv_path} (batch={batch_size}, seed={seed})")
    _generate_rows_csv(record_type, csv_path, rows=rows, batch_size=batch_size, seed=seed)
    typer.echo(f"CSV generation completed in {time.perf_counter() - start:.2f}s")

    if no_load:
        typer.echo("Skipping load (no-load flag set).")
        return

    persistence = PostgresRecordPersistence(
        record_type,
        table_name=table,
        connection_factory=lambda: sync_connection(dsn),
    )
    persistence.ensure_table()
    typer.echo(f"Loading CSV into '{persistence.table_name}' via COPY...")
    _copy_into_db(persistence, csv_path, dsn)
    typer.echo(f"Load completed. Total time {time.perf_counter() - start:.2f}s.")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
