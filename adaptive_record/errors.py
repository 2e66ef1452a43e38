"""
Error taxonomy for Adaptive Record.

Every error is raised synchronously to the immediate caller and carries enough
context (field name, identifier value, expected vs. actual type) for an outer
layer to render a useful message. Nothing here is caught or retried internally.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Optional


class AdaptiveRecordError(Exception):
    """Base class for all Adaptive Record errors."""


class MalformedInputError(AdaptiveRecordError):
    """Schema input could not be parsed into the expected field-list shape."""


class SchemaValidationError(AdaptiveRecordError):
    """
    The field list violates the identity, typing, control or options rules.

    Attributes
    ----------
    errors : list[str]
        Every violation found in the field list, in field order.
    """

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors: List[str] = list(errors)
        if len(self.errors) == 1:
            message = self.errors[0]
        else:
            message = f"{len(self.errors)} schema violations: " + "; ".join(self.errors)
        super().__init__(message)


class NotConfiguredError(AdaptiveRecordError):
    """An operation needs configuration (type, table name, callback) that is missing."""


class TypeAlreadyCreatedError(AdaptiveRecordError):
    """A record type was already created for this store; build a new store instead."""


class RecordNotFoundError(AdaptiveRecordError, LookupError):
    """No cached row is indexed under the given identifier."""

    def __init__(self, record_id: Any) -> None:
        self.record_id = record_id
        super().__init__(f"Record with Id={record_id!r} was not found.")


class TypeMismatchError(AdaptiveRecordError, TypeError):
    """An instance does not belong to the record type built by the store."""

    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Instance does not match the expected type: expected {expected}, got {actual}.")


class TypeCoercionError(AdaptiveRecordError, ValueError):
    """A stored value cannot be converted to the declared field type."""

    def __init__(
        self,
        field_name: str,
        source_type: str,
        target_type: str,
        value: Optional[Any] = None,
    ) -> None:
        self.field_name = field_name
        self.source_type = source_type
        self.target_type = target_type
        self.value = value
        super().__init__(
            f"Cannot convert value {value!r} of type {source_type} "
            f"to {target_type} for field '{field_name}'."
        )


__all__ = [
    "AdaptiveRecordError",
    "MalformedInputError",
    "SchemaValidationError",
    "NotConfiguredError",
    "TypeAlreadyCreatedError",
    "RecordNotFoundError",
    "TypeMismatchError",
    "TypeCoercionError",
]
