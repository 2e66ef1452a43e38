"""
SQL generation from a runtime record type.

Statement text and parameter maps are generated independently from the same
`RecordType`; parameters are addressed by name (`@<FieldName>`), so the two
always agree as long as both read the same descriptor.

Usage:
    generator = SqlGenerator(record_type, "People")
    sql = generator.generate_update_query()
    params = generator.map_parameters(row, StatementKind.UPDATE)
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from adaptive_record.domain.models import SemanticType
from adaptive_record.domain.record_type import ID_FIELD, RecordType
from adaptive_record.errors import NotConfiguredError

PARAMETER_PREFIX = "@"

_PLAIN_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class SqlDialect(str, Enum):
    SQLITE = "sqlite"
    POSTGRES = "postgres"


class StatementKind(str, Enum):
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


_COLUMN_TYPES: Dict[SqlDialect, Dict[SemanticType, str]] = {
    SqlDialect.SQLITE: {
        SemanticType.INT32: "INTEGER",
        SemanticType.INT64: "INTEGER",
        SemanticType.STRING: "TEXT",
        SemanticType.DATETIME: "DATE",
        SemanticType.DATETIME_OFFSET: "DATE",
        SemanticType.BOOLEAN: "BOOLEAN",
        SemanticType.DECIMAL: "NUMERIC",
        SemanticType.DOUBLE: "REAL",
    },
    SqlDialect.POSTGRES: {
        SemanticType.INT32: "INTEGER",
        SemanticType.INT64: "BIGINT",
        SemanticType.STRING: "TEXT",
        SemanticType.DATETIME: "DATE",
        SemanticType.DATETIME_OFFSET: "TIMESTAMPTZ",
        SemanticType.BOOLEAN: "BOOLEAN",
        SemanticType.DECIMAL: "NUMERIC",
        SemanticType.DOUBLE: "DOUBLE PRECISION",
    },
}

_IDENTITY_COLUMNS: Dict[SqlDialect, Dict[SemanticType, str]] = {
    SqlDialect.SQLITE: {
        SemanticType.INT32: "INTEGER PRIMARY KEY AUTOINCREMENT",
        SemanticType.INT64: "INTEGER PRIMARY KEY AUTOINCREMENT",
    },
    SqlDialect.POSTGRES: {
        SemanticType.INT32: "SERIAL PRIMARY KEY",
        SemanticType.INT64: "BIGSERIAL PRIMARY KEY",
    },
}


def parameter_name(field_name: str) -> str:
    return f"{PARAMETER_PREFIX}{field_name}"


class SqlGenerator:
    """
    Generates parameterized CRUD statements for one record type and table.

    `record_type` and `table_name` may be given at construction or assigned
    later; every generate call requires both.
    """

    def __init__(
        self,
        record_type: Optional[RecordType] = None,
        table_name: Optional[str] = None,
        dialect: SqlDialect | str = SqlDialect.SQLITE,
        null_value: Any = None,
    ) -> None:
        self.record_type = record_type
        self.table_name = table_name
        self.dialect = SqlDialect(dialect)
        self.null_value = null_value

    def _require(self) -> RecordType:
        if self.record_type is None:
            raise NotConfiguredError("SQL generation requires a record type; set `record_type` first.")
        if not self.table_name or not self.table_name.strip():
            raise NotConfiguredError("SQL generation requires a table name; set `table_name` first.")
        return self.record_type

    def quote(self, identifier: str) -> str:
        """Quote an identifier for the dialect; plain names stay bare outside Postgres."""
        if self.dialect is SqlDialect.SQLITE and _PLAIN_IDENTIFIER.match(identifier):
            return identifier
        escaped = identifier.replace('"', '""')
        return f'"{escaped}"'

    def _table(self) -> str:
        return self.quote(self.table_name.strip())  # type: ignore[union-attr]

    def generate_create_table_query(self) -> str:
        record_type = self._require()
        column_types = _COLUMN_TYPES[self.dialect]
        columns: List[str] = []
        for field in record_type:
            if field.is_identity:
                ddl = _IDENTITY_COLUMNS[self.dialect][field.semantic_type]
            else:
                ddl = column_types[field.semantic_type]
            columns.append(f"{self.quote(field.name)} {ddl}")
        return f"CREATE TABLE IF NOT EXISTS {self._table()} ({', '.join(columns)})"

    def generate_select_query(self) -> str:
        self._require()
        return f"SELECT * FROM {self._table()}"

    def generate_insert_query(self) -> str:
        """
        INSERT for every field except `Id`, which the storage engine assigns.
        """
        record_type = self._require()
        fields = record_type.data_fields
        if not fields:
            return f"INSERT INTO {self._table()} DEFAULT VALUES"
        columns = ", ".join(self.quote(f.name) for f in fields)
        values = ", ".join(parameter_name(f.name) for f in fields)
        return f"INSERT INTO {self._table()} ({columns}) VALUES ({values})"

    def generate_update_query(self) -> str:
        record_type = self._require()
        identity = self.quote(ID_FIELD)
        fields = record_type.data_fields
        if fields:
            assignments = ", ".join(f"{self.quote(f.name)} = {parameter_name(f.name)}" for f in fields)
        else:
            assignments = f"{identity} = {parameter_name(ID_FIELD)}"
        return f"UPDATE {self._table()} SET {assignments} WHERE {identity} = {parameter_name(ID_FIELD)}"

    def generate_delete_query(self) -> str:
        self._require()
        return f"DELETE FROM {self._table()} WHERE {self.quote(ID_FIELD)} = {parameter_name(ID_FIELD)}"

    def map_parameters(
        self,
        row: Mapping[str, Any],
        kind: StatementKind | str = StatementKind.UPDATE,
    ) -> Dict[str, Any]:
        """
        Map each parameter the statement of `kind` needs to the row's value.

        Insert binds every non-Id field, update adds `@Id`, delete binds only
        `@Id`. Null values become the configured null sentinel.
        """
        record_type = self._require()
        kind = StatementKind(kind)

        names: List[str] = []
        if kind is not StatementKind.DELETE:
            names.extend(f.name for f in record_type.data_fields)
        if kind is not StatementKind.INSERT:
            names.append(ID_FIELD)

        parameters: Dict[str, Any] = {}
        for name in names:
            value = row.get(name)
            parameters[parameter_name(name)] = self.null_value if value is None else value
        return parameters


__all__ = [
    "PARAMETER_PREFIX",
    "SqlDialect",
    "SqlGenerator",
    "StatementKind",
    "parameter_name",
]
