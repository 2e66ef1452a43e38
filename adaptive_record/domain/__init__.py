"""
Domain package for Adaptive Record.

Exports the schema field model, the semantic types and the runtime record
type/instance pair. Keep this package focused on data definitions.
"""

from adaptive_record.domain.models import CHOICE_CONTROL_KINDS, FieldDefinition, SemanticType
from adaptive_record.domain.record_type import ID_FIELD, RecordField, RecordInstance, RecordType

__all__ = [
    "CHOICE_CONTROL_KINDS",
    "FieldDefinition",
    "ID_FIELD",
    "RecordField",
    "RecordInstance",
    "RecordType",
    "SemanticType",
]
