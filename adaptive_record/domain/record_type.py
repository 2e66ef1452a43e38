"""
Runtime record types.

A `RecordType` is the data-driven shape produced from a validated field list:
an ordered mapping of field name to semantic type, with each field's schema
metadata carried along untouched. Values of a record type are
`RecordInstance` objects, which expose one attribute per field and keep
their values in a plain dict.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Tuple

from adaptive_record.domain.models import FieldDefinition, SemanticType

ID_FIELD = "Id"


@dataclass(frozen=True)
class RecordField:
    """One field of a runtime record type."""

    name: str
    semantic_type: SemanticType
    definition: FieldDefinition

    @property
    def is_identity(self) -> bool:
        return self.name == ID_FIELD


@dataclass(frozen=True)
class RecordType:
    """
    Immutable descriptor of a runtime record type.

    Two descriptors built from the same field list compare equal, so an
    instance created against either one is accepted by a store holding the
    other.
    """

    name: str
    fields: Tuple[RecordField, ...]

    def __len__(self) -> int:
        return len(self.fields)

    def __iter__(self) -> Iterator[RecordField]:
        return iter(self.fields)

    def __contains__(self, name: object) -> bool:
        return any(f.name == name for f in self.fields)

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    @property
    def id_field(self) -> RecordField:
        return self.get(ID_FIELD)

    @property
    def data_fields(self) -> Tuple[RecordField, ...]:
        """Fields other than `Id`, in declaration order."""
        return tuple(f for f in self.fields if not f.is_identity)

    @property
    def display_fields(self) -> Tuple[RecordField, ...]:
        return tuple(f for f in self.fields if f.definition.is_display_field)

    def get(self, name: str) -> RecordField:
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(name)

    def new_instance(self, **values: Any) -> "RecordInstance":
        """Create an instance of this type; unset fields read as None."""
        return RecordInstance(self, **values)


class RecordInstance:
    """
    A value of a `RecordType`, with one attribute per declared field.

    Attribute access is restricted to the declared fields; reading or writing
    any other name raises AttributeError.
    """

    __slots__ = ("_record_type", "_values")

    def __init__(self, record_type: RecordType, **values: Any) -> None:
        object.__setattr__(self, "_record_type", record_type)
        object.__setattr__(self, "_values", {name: None for name in record_type.field_names})
        for name, value in values.items():
            setattr(self, name, value)

    @property
    def record_type(self) -> RecordType:
        return self._record_type

    def __getattr__(self, name: str) -> Any:
        values: Dict[str, Any] = object.__getattribute__(self, "_values")
        if name in values:
            return values[name]
        raise AttributeError(f"{self._record_type.name!r} record has no field {name!r}")

    def __setattr__(self, name: str, value: Any) -> None:
        if name not in self._values:
            raise AttributeError(f"{self._record_type.name!r} record has no field {name!r}")
        self._values[name] = value

    def get(self, name: str, default: Optional[Any] = None) -> Any:
        return self._values.get(name, default)

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RecordInstance):
            return NotImplemented
        return self._record_type == other._record_type and self._values == other._values

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        body = ", ".join(f"{k}={v!r}" for k, v in self._values.items())
        return f"{self._record_type.name}({body})"


__all__ = ["ID_FIELD", "RecordField", "RecordInstance", "RecordType"]
