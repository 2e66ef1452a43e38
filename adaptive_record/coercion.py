"""
Value coercion between cached rows and record instances.

A small dispatch table keyed by semantic type converts storage values into
attribute values. Dates get special treatment in both directions:

- strings are parsed with locale-invariant formats; unparsable text becomes
  None instead of raising;
- storage-native dates destined for an offset field get a zero (UTC) offset;
- on write-back, an unset or default date becomes the sentinel `1900-01-01`
  and any other date is formatted `yyyy-MM-dd`.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Annotated, Any, Callable, Dict, Optional

from pydantic import Field, TypeAdapter, ValidationError

from adaptive_record.domain.models import SemanticType
from adaptive_record.domain.record_type import RecordField
from adaptive_record.errors import TypeCoercionError

SENTINEL_DATE = "1900-01-01"

# Invariant-culture forms accepted in addition to ISO 8601.
_INVARIANT_DATE_FORMATS = (
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
    "%Y/%m/%d",
    "%d %B %Y",
    "%B %d, %Y",
    "%A, %d %B %Y",
)

Int32 = Annotated[int, Field(ge=-(2**31), le=2**31 - 1)]
Int64 = Annotated[int, Field(ge=-(2**63), le=2**63 - 1)]

_ADAPTERS: Dict[SemanticType, TypeAdapter] = {
    SemanticType.INT32: TypeAdapter(Int32),
    SemanticType.INT64: TypeAdapter(Int64),
    SemanticType.BOOLEAN: TypeAdapter(bool),
    SemanticType.DECIMAL: TypeAdapter(Decimal),
    SemanticType.DOUBLE: TypeAdapter(float),
}


def parse_date(text: str, with_offset: bool = False) -> Optional[datetime]:
    """
    Parse `text` as a date/time without regard to the current locale.

    Returns None when the text matches no known form.
    """
    text = text.strip()
    if not text:
        return None
    parsed: Optional[datetime] = None
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        for fmt in _INVARIANT_DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is not None and with_offset and parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_default_date(value: Any) -> bool:
    """True for the unset date and the minimum representable dates."""
    if value is None:
        return True
    if isinstance(value, datetime):
        return value.replace(tzinfo=None) == datetime.min
    if isinstance(value, date):
        return value == date.min
    return False


def _type_label(value: Any) -> str:
    return type(value).__name__


def _to_date(field: RecordField, value: Any) -> Optional[datetime]:
    with_offset = field.semantic_type is SemanticType.DATETIME_OFFSET
    if isinstance(value, str):
        return parse_date(value, with_offset=with_offset)
    if isinstance(value, datetime):
        if with_offset and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    if isinstance(value, date):
        combined = datetime.combine(value, time())
        return combined.replace(tzinfo=timezone.utc) if with_offset else combined
    raise TypeCoercionError(field.name, _type_label(value), field.semantic_type.value, value)


def _to_string(field: RecordField, value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        raise TypeCoercionError(field.name, _type_label(value), field.semantic_type.value, value)
    return str(value)


def _via_adapter(field: RecordField, value: Any) -> Any:
    adapter = _ADAPTERS[field.semantic_type]
    # Booleans never widen into numbers.
    if field.semantic_type is not SemanticType.BOOLEAN and isinstance(value, bool):
        raise TypeCoercionError(field.name, _type_label(value), field.semantic_type.value, value)
    try:
        return adapter.validate_python(value)
    except ValidationError as exc:
        raise TypeCoercionError(
            field.name, _type_label(value), field.semantic_type.value, value
        ) from exc


_CONVERTERS: Dict[SemanticType, Callable[[RecordField, Any], Any]] = {
    SemanticType.INT32: _via_adapter,
    SemanticType.INT64: _via_adapter,
    SemanticType.STRING: _to_string,
    SemanticType.DATETIME: _to_date,
    SemanticType.DATETIME_OFFSET: _to_date,
    SemanticType.BOOLEAN: _via_adapter,
    SemanticType.DECIMAL: _via_adapter,
    SemanticType.DOUBLE: _via_adapter,
}


def to_attribute(field: RecordField, value: Any) -> Any:
    """
    Convert a storage value into the attribute value for `field`.

    Raises
    ------
    TypeCoercionError
        If the value cannot be converted to the field's semantic type.
    """
    if value is None:
        return None
    return _CONVERTERS[field.semantic_type](field, value)


def to_storage(field: RecordField, value: Any) -> Any:
    """
    Convert an attribute value into the value written back to a row.

    Only date fields are transformed; every other value passes through.
    Blank text counts as an unset date.

    Raises
    ------
    TypeCoercionError
        If a date field holds text that is not a date, or a non-date value.
    """
    if not field.semantic_type.is_date:
        return value
    if isinstance(value, str):
        parsed = parse_date(value)
        if parsed is None and value.strip():
            raise TypeCoercionError(field.name, _type_label(value), field.semantic_type.value, value)
        value = parsed
    if is_default_date(value):
        return SENTINEL_DATE
    if isinstance(value, (datetime, date)):
        return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
    raise TypeCoercionError(field.name, _type_label(value), field.semantic_type.value, value)


__all__ = [
    "SENTINEL_DATE",
    "is_default_date",
    "parse_date",
    "to_attribute",
    "to_storage",
]
