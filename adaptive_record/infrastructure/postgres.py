"""
PostgreSQL persistence for a record store.

Implements the four persistence callbacks on top of psycopg, executing the
statements produced by `SqlGenerator` in the POSTGRES dialect. Generated
statements use `@Name` parameters; psycopg expects `%(Name)s`, so statement
text and parameter keys are translated right before execution.
"""

from __future__ import annotations

import re
from contextlib import AbstractContextManager
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from psycopg import Connection

from adaptive_record.config import get_settings
from adaptive_record.domain.record_type import ID_FIELD, RecordType
from adaptive_record.infrastructure.db_factory import PoolManager
from adaptive_record.persistence import AbstractRecordPersistence
from adaptive_record.sql.generator import (
    PARAMETER_PREFIX,
    SqlDialect,
    SqlGenerator,
    StatementKind,
    parameter_name,
)
from adaptive_record.table import DataRow, DataTable
from adaptive_record.utils.logging import get_logger

log = get_logger(__name__)

ConnectionFactory = Callable[[], AbstractContextManager[Connection]]

# Cache column holding the database key of a row; the store owns `Id`.
STORAGE_ID_COLUMN = "__storage_id"

_NAMED_PARAMETER = re.compile(re.escape(PARAMETER_PREFIX) + r"(\w+)")


def to_pyformat(sql: str) -> str:
    """Rewrite `@Name` parameters as psycopg `%(Name)s` placeholders."""
    return _NAMED_PARAMETER.sub(r"%(\1)s", sql)


def to_pyformat_params(parameters: Mapping[str, Any]) -> Dict[str, Any]:
    return {key[len(PARAMETER_PREFIX):]: value for key, value in parameters.items()}


def storage_id(row: Mapping[str, Any]) -> Any:
    """The database key of `row`, falling back to `Id` for rows this layer never saw."""
    key = row.get(STORAGE_ID_COLUMN)
    return row.get(ID_FIELD) if key is None else key


def _remember_storage_id(row: DataRow, key: Any) -> None:
    row.table.add_column(STORAGE_ID_COLUMN)
    row[STORAGE_ID_COLUMN] = key


class PostgresRecordPersistence(AbstractRecordPersistence):
    """
    Persistence callbacks backed by one PostgreSQL table.

    Every callback runs in its own connection scope, which commits on a clean
    exit; errors propagate to the record store's caller unchanged.
    """

    def __init__(
        self,
        record_type: RecordType,
        table_name: Optional[str] = None,
        connection_factory: Optional[ConnectionFactory] = None,
    ) -> None:
        self.generator = SqlGenerator(
            record_type,
            table_name or get_settings().record_table,
            dialect=SqlDialect.POSTGRES,
        )
        self._connection_factory = connection_factory or PoolManager().connection

    @property
    def table_name(self) -> str:
        return self.generator.table_name  # type: ignore[return-value]

    def _execute(
        self, sql: str, parameters: Optional[Mapping[str, Any]] = None
    ) -> Optional[Tuple[Any, ...]]:
        """Execute one statement and return its first result row, if any."""
        with self._connection_factory() as conn:
            with conn.cursor() as cur:
                cur.execute(to_pyformat(sql), to_pyformat_params(parameters or {}))
                if cur.description is None:
                    return None
                return cur.fetchone()

    def ensure_table(self) -> None:
        self._execute(self.generator.generate_create_table_query())
        log.info("Ensured table exists", extra={"table": self.table_name})

    def fetch(self) -> DataTable:
        """
        Read the whole table, copying each row's `Id` into `STORAGE_ID_COLUMN`.

        The store replaces `Id` with its own identity once the rows are cached;
        the copy keeps the database key for `on_update` and `on_delete`.
        """
        with self._connection_factory() as conn:
            with conn.cursor() as cur:
                cur.execute(self.generator.generate_select_query())
                columns = [desc[0] for desc in cur.description]
                records = cur.fetchall()
        log.debug("Fetched table", extra={"table": self.table_name, "rows": len(records)})

        table = DataTable.from_records(columns, records, name=self.table_name)
        if table.has_column(ID_FIELD):
            for row in table:
                _remember_storage_id(row, row[ID_FIELD])
        return table

    def on_add(self, row: DataRow) -> None:
        """Insert the row and write the storage-assigned `Id` back into it."""
        sql = f"{self.generator.generate_insert_query()} RETURNING {self.generator.quote(ID_FIELD)}"
        assigned = self._execute(sql, self.generator.map_parameters(row, StatementKind.INSERT))
        if assigned is not None:
            row[ID_FIELD] = assigned[0]
            _remember_storage_id(row, assigned[0])
        log.debug("Inserted row", extra={"table": self.table_name, "id": row[ID_FIELD]})

    def _keyed_parameters(self, row: Mapping[str, Any], kind: StatementKind) -> Dict[str, Any]:
        parameters = self.generator.map_parameters(row, kind)
        parameters[parameter_name(ID_FIELD)] = storage_id(row)
        return parameters

    def on_update(self, row: DataRow) -> None:
        self._execute(
            self.generator.generate_update_query(),
            self._keyed_parameters(row, StatementKind.UPDATE),
        )

    def on_delete(self, row: DataRow) -> None:
        self._execute(
            self.generator.generate_delete_query(),
            self._keyed_parameters(row, StatementKind.DELETE),
        )


__all__ = [
    "ConnectionFactory",
    "PostgresRecordPersistence",
    "STORAGE_ID_COLUMN",
    "storage_id",
    "to_pyformat",
    "to_pyformat_params",
]
