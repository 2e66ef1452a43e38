"""
Pytest configuration for Adaptive Record.

Provides fixtures for:
- Sample schemas and record stores with a created record type
- A recording persistence double that captures callback traffic
- Database connection management for integration tests
"""

from __future__ import annotations

import copy
import json
import os
from typing import Any, Dict, Generator, Iterable, List, Mapping, Optional, Tuple

import psycopg
import pytest

from adaptive_record.config import Settings
from adaptive_record.store import RecordStore
from adaptive_record.table import DataRow

PEOPLE_SCHEMA: List[Dict[str, Any]] = [
    {
        "Name": "Id",
        "TypeName": "System.Int64",
        "ControlType": "TextBox",
        "IsRequired": True,
        "ControlParameters": {"IsReadOnly": True},
    },
    {
        "Name": "Username",
        "TypeName": "System.String",
        "ControlType": "TextBox",
        "Placeholder": "Enter a username",
        "IsRequired": True,
        "IsDisplayField": True,
    },
    {"Name": "Age", "TypeName": "System.Int64", "ControlType": "NumericUpDown"},
    {"Name": "DateOfBirth", "TypeName": "System.DateTime", "ControlType": "DatePicker"},
    {
        "Name": "Role",
        "TypeName": "System.String",
        "ControlType": "ComboBox",
        "Options": ["Admin", "User"],
        "DataSetControls": {"Aggregate": "Count"},
    },
]

MINIMAL_SCHEMA: List[Dict[str, Any]] = [
    {"Name": "Id", "TypeName": "System.Int64", "ControlType": "TextBox"},
    {"Name": "Username", "TypeName": "System.String", "ControlType": "TextBox"},
    {"Name": "Age", "TypeName": "System.Int64", "ControlType": "NumericUpDown"},
]


class RecordingPersistence:
    """
    Persistence double that records every callback with a snapshot of the row.

    When `first_storage_id` is set, `on_add` writes storage-assigned ids back
    into the row, counting up from that value.
    """

    def __init__(
        self,
        rows: Optional[Iterable[Mapping[str, Any]]] = None,
        first_storage_id: Optional[int] = None,
    ) -> None:
        self.rows = list(rows or [])
        self.calls: List[Tuple[str, Optional[Dict[str, Any]]]] = []
        self._next_storage_id = first_storage_id

    def fetch(self) -> List[Mapping[str, Any]]:
        self.calls.append(("fetch", None))
        return [dict(row) for row in self.rows]

    def on_add(self, row: DataRow) -> None:
        self.calls.append(("add", row.to_dict()))
        if self._next_storage_id is not None:
            row["Id"] = self._next_storage_id
            self._next_storage_id += 1

    def on_update(self, row: DataRow) -> None:
        self.calls.append(("update", row.to_dict()))

    def on_delete(self, row: DataRow) -> None:
        self.calls.append(("delete", row.to_dict()))

    @property
    def kinds(self) -> List[str]:
        return [kind for kind, _ in self.calls]


@pytest.fixture
def people_schema() -> List[Dict[str, Any]]:
    return copy.deepcopy(PEOPLE_SCHEMA)


@pytest.fixture
def people_schema_json() -> str:
    return json.dumps(PEOPLE_SCHEMA)


@pytest.fixture
def minimal_schema_json() -> str:
    return json.dumps(MINIMAL_SCHEMA)


@pytest.fixture
def persistence() -> RecordingPersistence:
    return RecordingPersistence()


@pytest.fixture
def persistence_factory():
    """Build recording persistences with custom fetch rows or storage ids."""
    return RecordingPersistence


@pytest.fixture
def store(people_schema_json: str, persistence: RecordingPersistence) -> RecordStore:
    """A store with the people record type created and a recording persistence bound."""
    record_store = RecordStore(table_name="People")
    record_store.create_type(people_schema_json, name="Person")
    record_store.bind(persistence)
    return record_store


@pytest.fixture
def schema_file(tmp_path, people_schema_json: str):
    path = tmp_path / "people.json"
    path.write_text(people_schema_json, encoding="utf-8")
    return path


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "adaptive_record"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped autocommit connection for integration tests.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn, autocommit=True)
    try:
        yield conn
    finally:
        conn.close()
