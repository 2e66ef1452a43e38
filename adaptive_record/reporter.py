from __future__ import annotations

import json
from typing import Any, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from adaptive_record.domain.record_type import RecordType
from adaptive_record.table import DataTable


def _cell(value: Any) -> str:
    if value is None:
        return "[dim]NULL[/dim]"
    return str(value)


def structure_table(record_type: RecordType) -> Table:
    """
    Build a rich table describing each field of a record type.
    """
    table = Table(
        title=f"Record Type: {record_type.name}",
        box=box.ROUNDED,
        caption=f"{len(record_type)} fields",
    )
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Type", style="magenta")
    table.add_column("Control", style="green")
    table.add_column("Required", justify="center")
    table.add_column("Display", justify="center")
    table.add_column("Options", style="yellow")
    table.add_column("Parameters", style="dim")

    for field in record_type:
        definition = field.definition
        table.add_row(
            field.name,
            field.semantic_type.value,
            definition.control_type or "",
            "yes" if definition.is_required else "",
            "yes" if definition.is_display_field else "",
            ", ".join(definition.options or []),
            json.dumps(definition.control_parameters, default=str) if definition.control_parameters else "",
        )
    return table


def records_table(data: DataTable, title: Optional[str] = None) -> Table:
    """
    Build a rich table of the cached rows, one column per cache column.
    """
    table = Table(
        title=title or data.name,
        box=box.ROUNDED,
        caption=f"{len(data)} rows",
    )
    for column in data.columns:
        table.add_column(column, style="cyan" if column == "Id" else None, no_wrap=column == "Id")
    for row in data:
        table.add_row(*(_cell(row[column]) for column in data.columns))
    return table


def print_structure(record_type: RecordType, console: Optional[Console] = None) -> None:
    (console or Console()).print(structure_table(record_type))


def print_records(data: DataTable, console: Optional[Console] = None) -> None:
    """
    Render cached rows as a rich table.
    """
    console = console or Console()
    if not len(data):
        console.print("[yellow]No records to display.[/yellow]")
        return
    console.print(records_table(data))


__all__ = ["print_records", "print_structure", "records_table", "structure_table"]
