"""
In-memory tabular cache.

`DataTable` holds an ordered list of columns and the rows sharing them;
`DataRow` is a mutable mapping from column name to value that always reflects
the current columns of its table. Missing values are stored as None.
"""

from __future__ import annotations

from typing import (
    Any,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    MutableMapping,
    Optional,
    Sequence,
    Union,
)


class DataRow(MutableMapping[str, Any]):
    """
    A single row of a `DataTable`.

    Reading or writing a column the table does not have raises KeyError; rows
    cannot drop columns.
    """

    __slots__ = ("_table", "_values")

    def __init__(self, table: "DataTable", values: Optional[Mapping[str, Any]] = None) -> None:
        self._table = table
        self._values: Dict[str, Any] = {}
        for column, value in (values or {}).items():
            self[column] = value

    @property
    def table(self) -> "DataTable":
        return self._table

    def __getitem__(self, column: str) -> Any:
        if not self._table.has_column(column):
            raise KeyError(f"Column '{column}' does not belong to table '{self._table.name}'.")
        return self._values.get(column)

    def __setitem__(self, column: str, value: Any) -> None:
        if not self._table.has_column(column):
            raise KeyError(f"Column '{column}' does not belong to table '{self._table.name}'.")
        self._values[column] = value

    def __delitem__(self, column: str) -> None:
        raise TypeError("Columns cannot be removed from a single row.")

    def __iter__(self) -> Iterator[str]:
        return iter(self._table.columns)

    def __len__(self) -> int:
        return len(self._table.columns)

    def to_dict(self) -> Dict[str, Any]:
        return {column: self._values.get(column) for column in self._table.columns}

    def __repr__(self) -> str:
        return f"DataRow({self.to_dict()!r})"


TabularSource = Union["DataTable", Iterable[Mapping[str, Any]]]


class DataTable:
    """
    Ordered rows sharing one column schema.
    """

    def __init__(self, name: str = "Records", columns: Sequence[str] = ()) -> None:
        self.name = name
        self._columns: List[str] = []
        self._rows: List[DataRow] = []
        for column in columns:
            self.add_column(column)

    @classmethod
    def from_records(
        cls,
        columns: Sequence[str],
        records: Iterable[Sequence[Any]],
        name: str = "Records",
    ) -> "DataTable":
        """Build a table from positional records, e.g. a DB-API cursor result."""
        table = cls(name=name, columns=columns)
        for record in records:
            table.add_row(table.new_row(dict(zip(columns, record, strict=True))))
        return table

    @property
    def columns(self) -> List[str]:
        return list(self._columns)

    @property
    def rows(self) -> List[DataRow]:
        return list(self._rows)

    def has_column(self, column: str) -> bool:
        return column in self._columns

    def add_column(self, column: str) -> None:
        if not column:
            raise ValueError("Column name must be non-empty.")
        if column not in self._columns:
            self._columns.append(column)

    def new_row(self, values: Optional[Mapping[str, Any]] = None) -> DataRow:
        """Create a row bound to this table's columns without adding it."""
        return DataRow(self, values)

    def add_row(self, row: DataRow) -> DataRow:
        if row.table is not self:
            raise ValueError("Row belongs to another table.")
        self._rows.append(row)
        return row

    def remove_row(self, row: DataRow) -> None:
        # Identity, not equality: two rows may hold the same values.
        for index, candidate in enumerate(self._rows):
            if candidate is row:
                del self._rows[index]
                return
        raise ValueError("Row is not part of this table.")

    def clear(self) -> None:
        """Remove all rows, keeping the columns."""
        self._rows.clear()

    def merge(self, source: TabularSource) -> List[DataRow]:
        """
        Append the rows of `source`, matching values column-for-column.

        Columns present in `source` but missing here are added first. Returns
        the newly appended rows.
        """
        if isinstance(source, DataTable):
            source_columns = source.columns
            records: Iterable[Mapping[str, Any]] = (row.to_dict() for row in source)
        else:
            records = list(source)
            source_columns = []
            for record in records:
                for column in record:
                    if column not in source_columns:
                        source_columns.append(column)

        for column in source_columns:
            self.add_column(column)

        merged = [self.add_row(self.new_row(record)) for record in records]
        return merged

    def to_records(self) -> List[Dict[str, Any]]:
        return [row.to_dict() for row in self._rows]

    def __iter__(self) -> Iterator[DataRow]:
        return iter(list(self._rows))

    def __len__(self) -> int:
        return len(self._rows)

    def __repr__(self) -> str:
        return f"DataTable(name={self.name!r}, columns={self._columns!r}, rows={len(self._rows)})"


__all__ = ["DataRow", "DataTable", "TabularSource"]
