"""
Adaptive Record - schema-driven record types, in-memory record caching and SQL generation.

A caller describes a record's shape as a JSON array of field definitions and,
at runtime, gets:

- a validated record type (field name -> semantic type plus UI metadata)
- an in-memory record store keyed by synthetic identifiers
- parameterized CREATE/SELECT/INSERT/UPDATE/DELETE statements for that type
- consistent rows, record instances and backing store across add/update/delete

Persistence is delegated to caller-supplied callbacks; a PostgreSQL
implementation lives in `adaptive_record.infrastructure`.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from adaptive_record.builder import TypeBuilder
from adaptive_record.config import Settings, get_settings
from adaptive_record.domain import FieldDefinition, RecordInstance, RecordType, SemanticType
from adaptive_record.errors import (
    AdaptiveRecordError,
    MalformedInputError,
    NotConfiguredError,
    RecordNotFoundError,
    SchemaValidationError,
    TypeAlreadyCreatedError,
    TypeCoercionError,
    TypeMismatchError,
)
from adaptive_record.items import RecordItem
from adaptive_record.persistence import AbstractRecordPersistence, RecordPersistence
from adaptive_record.sql import SqlDialect, SqlGenerator, StatementKind
from adaptive_record.store import RecordStore
from adaptive_record.table import DataRow, DataTable
from adaptive_record.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Schema and record types
    "FieldDefinition",
    "RecordInstance",
    "RecordType",
    "SemanticType",
    "TypeBuilder",
    # Store and cache
    "DataRow",
    "DataTable",
    "RecordItem",
    "RecordStore",
    # Persistence contracts
    "AbstractRecordPersistence",
    "RecordPersistence",
    # SQL generation
    "SqlDialect",
    "SqlGenerator",
    "StatementKind",
    # Errors
    "AdaptiveRecordError",
    "MalformedInputError",
    "NotConfiguredError",
    "RecordNotFoundError",
    "SchemaValidationError",
    "TypeAlreadyCreatedError",
    "TypeCoercionError",
    "TypeMismatchError",
    # Logging
    "configure_logging",
    "get_logger",
]
