"""
Editable views over cached rows.

A `RecordItem` wraps one live `DataRow` for an editor: it exposes the row's
values, derives a display name from the schema's display fields and tracks
whether the row was edited since it was last saved.
"""

from __future__ import annotations

from typing import Any

from adaptive_record.domain.record_type import ID_FIELD, RecordType
from adaptive_record.table import DataRow

DISPLAY_SEPARATOR = " - "


class RecordItem:
    def __init__(self, row: DataRow, record_type: RecordType) -> None:
        self.row = row
        self.record_type = record_type
        self.is_dirty = False

    @property
    def record_id(self) -> Any:
        return self.row[ID_FIELD]

    @property
    def display_name(self) -> str:
        """Joined values of the display fields, or `Record <Id>` when none are set."""
        parts = [
            str(self.row.get(f.name))
            for f in self.record_type.display_fields
            if self.row.get(f.name) not in (None, "")
        ]
        if parts:
            return DISPLAY_SEPARATOR.join(parts)
        return f"Record {self.record_id}"

    def __getitem__(self, column: str) -> Any:
        return self.row[column]

    def __setitem__(self, column: str, value: Any) -> None:
        if column == ID_FIELD:
            raise KeyError(f"'{ID_FIELD}' is assigned by the store and cannot be edited.")
        if self.row[column] != value:
            self.row[column] = value
            self.is_dirty = True

    def mark_dirty(self) -> None:
        self.is_dirty = True

    def mark_clean(self) -> None:
        self.is_dirty = False

    def __repr__(self) -> str:
        flag = "*" if self.is_dirty else ""
        return f"RecordItem({self.display_name!r}{flag})"


__all__ = ["DISPLAY_SEPARATOR", "RecordItem"]
