"""
SQL package for Adaptive Record.

Re-exports the statement generator so callers can import from
`adaptive_record.sql` directly.
"""

from adaptive_record.sql.generator import (
    PARAMETER_PREFIX,
    SqlDialect,
    SqlGenerator,
    StatementKind,
    parameter_name,
)

__all__ = [
    "PARAMETER_PREFIX",
    "SqlDialect",
    "SqlGenerator",
    "StatementKind",
    "parameter_name",
]
