"""
Record store: the hub that keeps cached rows, record instances and the
backing store consistent.

The store owns:
- the runtime record type, created once from a JSON schema;
- a `DataTable` cache whose columns follow the record type;
- a process-local identity counter (starts at 1, never reused);
- the identity map from synthetic identifier to cached row;
- four optional persistence callbacks (`fetch`, `on_add`, `on_update`,
  `on_delete`).

Usage:
    store = RecordStore(fetch=load_people, on_add=insert_person)
    store.create_type(schema_json, name="Person")
    store.fetch_all()
    person = store.add_data_row({"Username": "Ann", "Age": 30})

All operations are synchronous and assume a single caller; callback errors
propagate unchanged and the cache is left as far along as the operation got.
"""

from __future__ import annotations

import json
import operator
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from pydantic import TypeAdapter, ValidationError

from adaptive_record import coercion
from adaptive_record.builder import TypeBuilder
from adaptive_record.domain.models import FieldDefinition
from adaptive_record.domain.record_type import ID_FIELD, RecordInstance, RecordType
from adaptive_record.errors import (
    MalformedInputError,
    NotConfiguredError,
    RecordNotFoundError,
    TypeAlreadyCreatedError,
    TypeMismatchError,
)
from adaptive_record.items import RecordItem
from adaptive_record.persistence import FetchCallback, RecordPersistence, RowCallback
from adaptive_record.table import DataRow, DataTable
from adaptive_record.utils.logging import get_logger

log = get_logger(__name__)

_FIELD_LIST = TypeAdapter(List[FieldDefinition])

SchemaInput = Union[str, bytes, Iterable[Mapping[str, Any]]]

NO_TYPE_MESSAGE = "No record type generated yet."


def _identity_key(record_id: Any) -> int:
    """Exact integer identity; floats, strings and booleans never match a row."""
    if isinstance(record_id, bool):
        raise RecordNotFoundError(record_id)
    try:
        return operator.index(record_id)
    except TypeError:
        raise RecordNotFoundError(record_id) from None


def parse_schema(schema: SchemaInput) -> List[FieldDefinition]:
    """
    Parse declarative field definitions from JSON text or decoded JSON.

    Raises
    ------
    MalformedInputError
        If the input is not a JSON array of field objects.
    """
    try:
        if isinstance(schema, (str, bytes, bytearray)):
            return _FIELD_LIST.validate_json(schema)
        return _FIELD_LIST.validate_python(list(schema))
    except (ValidationError, TypeError) as exc:
        raise MalformedInputError(f"Invalid JSON format for field definitions: {exc}") from exc


class RecordStore:
    """
    In-memory cache of records for one runtime record type.
    """

    def __init__(
        self,
        fetch: Optional[FetchCallback] = None,
        on_add: Optional[RowCallback] = None,
        on_update: Optional[RowCallback] = None,
        on_delete: Optional[RowCallback] = None,
        table_name: str = "Records",
        builder: Optional[TypeBuilder] = None,
    ) -> None:
        self.fetch = fetch
        self.on_add = on_add
        self.on_update = on_update
        self.on_delete = on_delete
        self._builder = builder or TypeBuilder()
        self._record_type: Optional[RecordType] = None
        self._table = DataTable(name=table_name)
        self._identity_map: Dict[int, DataRow] = {}
        self._next_id = 1

    @property
    def record_type(self) -> Optional[RecordType]:
        """The record type created by `create_type`, or None before that."""
        return self._record_type

    def bind(self, persistence: RecordPersistence) -> None:
        """Use all four callbacks of `persistence`."""
        self.fetch = persistence.fetch
        self.on_add = persistence.on_add
        self.on_update = persistence.on_update
        self.on_delete = persistence.on_delete

    # Type creation

    def create_type(self, schema: SchemaInput, name: Optional[str] = None) -> RecordType:
        """
        Parse `schema`, build the record type and shape the cache after it.

        Raises
        ------
        MalformedInputError
            If the schema cannot be parsed into a field list.
        SchemaValidationError
            If the field list breaks the identity, control or options rules.
        TypeAlreadyCreatedError
            If this store already has a record type.
        """
        if self._record_type is not None:
            raise TypeAlreadyCreatedError(
                f"Record type '{self._record_type.name}' was already created; use a new store."
            )
        fields = parse_schema(schema)
        record_type = self._builder.build(fields, name=name)

        for field in record_type:
            self._table.add_column(field.name)
        self._record_type = record_type
        log.info(
            "Record type created",
            extra={"record_type": record_type.name, "fields": len(record_type)},
        )
        return record_type

    def _require_type(self) -> RecordType:
        if self._record_type is None:
            raise NotConfiguredError("No record type has been created; call create_type first.")
        return self._record_type

    def _allocate_id(self) -> int:
        record_id = self._next_id
        self._next_id += 1
        return record_id

    # Row <-> instance conversion

    def instance_from_row(self, row: DataRow) -> RecordInstance:
        """
        Build a record instance from a cached row, coercing every value.

        Raises
        ------
        TypeCoercionError
            If a stored value cannot be converted to its field's type.
        """
        record_type = self._require_type()
        instance = record_type.new_instance()
        for field in record_type:
            if not row.table.has_column(field.name):
                continue
            setattr(instance, field.name, coercion.to_attribute(field, row[field.name]))
        return instance

    def _check_instance(self, instance: Any) -> RecordInstance:
        record_type = self._require_type()
        if not isinstance(instance, RecordInstance):
            raise TypeMismatchError(record_type.name, type(instance).__name__)
        if instance.record_type != record_type:
            raise TypeMismatchError(record_type.name, instance.record_type.name)
        return instance

    def _resolve(self, instance: Any) -> Tuple[int, DataRow]:
        instance = self._check_instance(instance)
        key = _identity_key(instance.Id)
        return key, self._row_for(key)

    def _row_for(self, key: int) -> DataRow:
        row = self._identity_map.get(key)
        if row is None:
            raise RecordNotFoundError(key)
        return row

    def _identity_of(self, row: DataRow) -> int:
        for record_id, candidate in self._identity_map.items():
            if candidate is row:
                return record_id
        raise RecordNotFoundError(row.get(ID_FIELD))

    # Operations

    def fetch_all(self) -> List[RecordInstance]:
        """
        Replace the cache with the rows returned by the `fetch` callback.

        Every fetched row gets a fresh identity written into its `Id` column
        and is indexed under it. Persistence callbacks are not invoked.

        Returns
        -------
        list[RecordInstance]
            The fetched rows converted to record instances.
        """
        record_type = self._require_type()
        if self.fetch is None:
            raise NotConfiguredError("FetchData callback is not set.")

        self._table.clear()
        self._identity_map.clear()

        fetched = self.fetch()
        rows = self._table.merge(fetched)

        instances: List[RecordInstance] = []
        for row in rows:
            record_id = self._allocate_id()
            row[ID_FIELD] = record_id
            instances.append(self.instance_from_row(row))
            self._identity_map[record_id] = row

        log.info(
            "Fetched records",
            extra={"record_type": record_type.name, "rows": len(rows), "next_id": self._next_id},
        )
        return instances

    def add_data_row(self, instance: Union[RecordInstance, Mapping[str, Any]]) -> RecordInstance:
        """
        Append a new row built from `instance` and hand it to `on_add`.

        A mapping of field values is accepted in place of an instance; its
        `Id` and any undeclared keys are ignored. The allocated identity is
        written into the instance's `Id`.
        """
        record_type = self._require_type()
        if isinstance(instance, Mapping):
            instance = record_type.new_instance(
                **{k: v for k, v in instance.items() if k in record_type and k != ID_FIELD}
            )
        else:
            instance = self._check_instance(instance)

        record_id = self._allocate_id()
        instance.Id = record_id

        row = self._table.new_row()
        row[ID_FIELD] = record_id
        for field in record_type.data_fields:
            row[field.name] = getattr(instance, field.name)

        self._table.add_row(row)
        self._identity_map[record_id] = row
        log.debug("Record added", extra={"record_type": record_type.name, "record_id": record_id})

        if self.on_add is not None:
            self.on_add(row)
        return instance

    def update_data_row(self, instance: RecordInstance) -> DataRow:
        """
        Overwrite the cached row of `instance` with its values and hand it to `on_update`.

        Date fields are written back as `yyyy-MM-dd`, with unset dates stored
        as the sentinel `1900-01-01`.

        Raises
        ------
        TypeMismatchError
            If `instance` is not of this store's record type.
        RecordNotFoundError
            If no row is indexed under the instance's `Id`.
        """
        record_id, row = self._resolve(instance)
        record_type = self._require_type()
        for field in record_type.data_fields:
            row[field.name] = coercion.to_storage(field, getattr(instance, field.name))

        log.debug("Record updated", extra={"record_type": record_type.name, "record_id": record_id})
        if self.on_update is not None:
            self.on_update(row)
        return row

    def delete_data_row(self, instance: RecordInstance) -> None:
        """
        Hand the row of `instance` to `on_delete`, then drop it from the cache.

        Raises
        ------
        TypeMismatchError
            If `instance` is not of this store's record type.
        RecordNotFoundError
            If no row is indexed under the instance's `Id`.
        """
        record_id, row = self._resolve(instance)
        if self.on_delete is not None:
            self.on_delete(row)
        self._table.remove_row(row)
        del self._identity_map[record_id]
        log.debug("Record deleted", extra={"record_id": record_id})

    def get_row_by_id(self, record_id: int) -> DataRow:
        return self._row_for(_identity_key(record_id))

    def get_table(self) -> DataTable:
        """The live cache; it reflects every later add, update and delete."""
        return self._table

    def __len__(self) -> int:
        return len(self._identity_map)

    def __contains__(self, record_id: object) -> bool:
        try:
            return _identity_key(record_id) in self._identity_map
        except RecordNotFoundError:
            return False

    # Editing helpers

    def items(self) -> List[RecordItem]:
        record_type = self._require_type()
        return [RecordItem(row, record_type) for row in self._table]

    def new_item(self) -> RecordItem:
        """Add an empty record and return it as a dirty item."""
        record_type = self._require_type()
        instance = self.add_data_row(record_type.new_instance())
        item = RecordItem(self.get_row_by_id(instance.Id), record_type)
        item.mark_dirty()
        return item

    def save_item(self, item: RecordItem) -> None:
        instance = self.instance_from_row(item.row)
        # on_add may have replaced row["Id"] with a storage-assigned value.
        instance.Id = self._identity_of(item.row)
        self.update_data_row(instance)
        item.mark_clean()

    def save_changes(self, items: Iterable[RecordItem]) -> int:
        """Save every dirty item and return how many were saved."""
        saved = 0
        for item in items:
            if item.is_dirty:
                self.save_item(item)
                saved += 1
        log.info("Saved changed records", extra={"saved": saved})
        return saved

    # Diagnostics

    def inspect_structure(self) -> str:
        """
        Describe each field's name, semantic type and control metadata.
        """
        if self._record_type is None:
            return NO_TYPE_MESSAGE + "\n"

        lines = [f"Generated Record Type: {self._record_type.name}"]
        for field in self._record_type:
            definition = field.definition
            lines.append(f"Field: {field.name}, Type: {field.semantic_type.value}")
            lines.append(f"  - ControlType: {definition.control_type}")
            if definition.placeholder:
                lines.append(f"  - Placeholder: {definition.placeholder}")
            lines.append(f"  - IsRequired: {definition.is_required}")
            lines.append(f"  - IsDisplayField: {definition.is_display_field}")
            if definition.options:
                lines.append(f"  - Options: {', '.join(definition.options)}")
            if definition.control_parameters:
                lines.append(f"  - ControlParameters: {json.dumps(definition.control_parameters, default=str)}")
            if definition.data_set_controls:
                lines.append(f"  - DataSetControls: {json.dumps(definition.data_set_controls, default=str)}")
        return "\n".join(lines) + "\n"


__all__ = ["NO_TYPE_MESSAGE", "RecordStore", "SchemaInput", "parse_schema"]
