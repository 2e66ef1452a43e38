"""
Domain models for Adaptive Record.

Defines the declarative description of one schema field as it arrives in the
JSON schema input (`Name`, `TypeName`, `ControlType`, ...) and the fixed set of
semantic types a field may declare. Control and aggregation metadata are
carried as opaque data; only their presence is ever validated.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

# Control kinds that render a choice list and therefore need options.
CHOICE_CONTROL_KINDS = frozenset({"ComboBox"})

READ_ONLY_PARAMETER = "IsReadOnly"


class SemanticType(str, Enum):
    """
    Semantic type of a field, valued by its canonical `System.*` name.
    """

    INT32 = "System.Int32"
    INT64 = "System.Int64"
    STRING = "System.String"
    DATETIME = "System.DateTime"
    DATETIME_OFFSET = "System.DateTimeOffset"
    BOOLEAN = "System.Boolean"
    DECIMAL = "System.Decimal"
    DOUBLE = "System.Double"

    @property
    def short_name(self) -> str:
        return self.value.split(".", 1)[1]

    @property
    def is_integer(self) -> bool:
        return self in (SemanticType.INT32, SemanticType.INT64)

    @property
    def is_date(self) -> bool:
        return self in (SemanticType.DATETIME, SemanticType.DATETIME_OFFSET)

    @classmethod
    def resolve(cls, type_name: Optional[str]) -> Optional["SemanticType"]:
        """
        Resolve a type name to a semantic type, or None when it is unknown.

        Accepts the full name (`System.Int64`), the short name (`Int64`) and the
        usual keyword aliases (`long`, `string`, ...).
        """
        if not type_name:
            return None
        return _TYPE_NAMES.get(type_name.strip())


_TYPE_NAMES: Dict[str, SemanticType] = {}
for _member in SemanticType:
    _TYPE_NAMES[_member.value] = _member
    _TYPE_NAMES[_member.short_name] = _member
del _member
_TYPE_NAMES.update(
    {
        "int": SemanticType.INT32,
        "long": SemanticType.INT64,
        "string": SemanticType.STRING,
        "bool": SemanticType.BOOLEAN,
        "decimal": SemanticType.DECIMAL,
        "double": SemanticType.DOUBLE,
    }
)


class FieldDefinition(BaseModel):
    """
    Declarative description of a single field in a record schema.
    """

    name: str = Field("", alias="Name", description="Field and storage column name.")
    type_name: str = Field("", alias="TypeName", description="Semantic type name, e.g. System.Int64.")
    control_type: Optional[str] = Field(None, alias="ControlType", description="UI control tag.")
    placeholder: Optional[str] = Field(None, alias="Placeholder")
    is_required: bool = Field(False, alias="IsRequired")
    is_display_field: bool = Field(False, alias="IsDisplayField")
    options: Optional[List[str]] = Field(None, alias="Options", description="Choices for choice controls.")
    control_parameters: Optional[Dict[str, Any]] = Field(None, alias="ControlParameters")
    data_set_controls: Optional[Dict[str, Any]] = Field(
        None, alias="DataSetControls", description="Opaque aggregation metadata."
    )

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "extra": "ignore",
    }

    @property
    def semantic_type(self) -> Optional[SemanticType]:
        return SemanticType.resolve(self.type_name)

    @property
    def is_choice(self) -> bool:
        return self.control_type in CHOICE_CONTROL_KINDS

    @property
    def is_read_only(self) -> bool:
        """True only when the control parameters carry a literal `true` for IsReadOnly."""
        for key, value in (self.control_parameters or {}).items():
            if key.lower() == READ_ONLY_PARAMETER.lower():
                return value is True
        return False


__all__ = [
    "CHOICE_CONTROL_KINDS",
    "FieldDefinition",
    "SemanticType",
]
