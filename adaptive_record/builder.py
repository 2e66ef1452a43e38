"""
Type builder: validates a field list as a set and synthesizes a `RecordType`.

Usage:
    from adaptive_record.builder import TypeBuilder

    record_type = TypeBuilder().build(fields, name="Person")
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, List, Optional, Sequence

from adaptive_record.domain.models import FieldDefinition
from adaptive_record.domain.record_type import ID_FIELD, RecordField, RecordType
from adaptive_record.errors import SchemaValidationError
from adaptive_record.utils.logging import get_logger

log = get_logger(__name__)

DEFAULT_TYPE_NAME = "AdaptiveRecord"


def _id_errors(fields: Sequence[FieldDefinition]) -> List[str]:
    candidates = [f for f in fields if f.name.strip().lower() == ID_FIELD.lower()]
    if not candidates:
        return [f"Schema is missing the '{ID_FIELD}' field."]
    if len(candidates) > 1:
        names = ", ".join(repr(f.name) for f in candidates)
        return [f"Schema declares more than one identity field: {names}."]

    errors: List[str] = []
    id_field = candidates[0]
    if id_field.name != ID_FIELD:
        errors.append(
            f"Identity field '{id_field.name}' has the wrong case; it must be named exactly '{ID_FIELD}'."
        )
    semantic_type = id_field.semantic_type
    if semantic_type is not None and not semantic_type.is_integer:
        errors.append(
            f"Identity field '{id_field.name}' must be a 32- or 64-bit integer, "
            f"not {semantic_type.value}."
        )
    return errors


def _field_errors(definition: FieldDefinition) -> List[str]:
    label = definition.name or "<unnamed>"
    errors: List[str] = []
    if not definition.name.strip():
        errors.append("A field has an empty Name.")
    if definition.semantic_type is None:
        errors.append(f"Field '{label}' has an unresolvable TypeName {definition.type_name!r}.")
    if not (definition.control_type or "").strip():
        errors.append(f"Field '{label}' must specify a ControlType.")
    if (
        definition.is_required
        and definition.name.lower() != ID_FIELD.lower()
        and definition.is_read_only
    ):
        errors.append(f"Required field '{label}' cannot be read-only.")
    if definition.is_choice and not definition.options:
        errors.append(f"Field '{label}' of type '{definition.control_type}' must include Options.")
    return errors


def validate_fields(fields: Sequence[FieldDefinition]) -> List[str]:
    """
    Check every rule over the whole field list and return all violations.
    """
    errors = _id_errors(fields)
    for definition in fields:
        errors.extend(_field_errors(definition))

    counts = Counter(f.name for f in fields if f.name.strip())
    for name, count in counts.items():
        if count > 1:
            errors.append(f"Field name '{name}' is declared {count} times.")
    return errors


class TypeBuilder:
    """
    Builds runtime record types from validated field lists.

    The builder holds no state between calls: building the same list twice
    yields equal descriptors.
    """

    def build(
        self,
        fields: Iterable[FieldDefinition],
        name: Optional[str] = None,
    ) -> RecordType:
        """
        Validate `fields` and return the corresponding `RecordType`.

        Raises
        ------
        SchemaValidationError
            If any rule is violated; `errors` lists every violation.
        """
        definitions = list(fields)
        errors = validate_fields(definitions)
        if errors:
            log.warning(
                "Schema validation failed",
                extra={"violations": len(errors), "fields": len(definitions)},
            )
            raise SchemaValidationError(errors)

        record_fields = tuple(
            RecordField(name=d.name, semantic_type=d.semantic_type, definition=d)  # type: ignore[arg-type]
            for d in definitions
        )
        return RecordType(name=name or DEFAULT_TYPE_NAME, fields=record_fields)


__all__ = ["DEFAULT_TYPE_NAME", "TypeBuilder", "validate_fields"]
