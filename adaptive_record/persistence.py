"""
Persistence callback contracts for the record store.

The store never talks to a database itself. It calls out to four optional
callbacks and keeps its cache consistent around them. Concrete persistence
layers (e.g. the PostgreSQL one in `adaptive_record.infrastructure`)
implement the `RecordPersistence` protocol and hand their methods to a store
through `RecordStore.bind`.
"""

from __future__ import annotations

import abc
from typing import Callable, Protocol, runtime_checkable

from adaptive_record.table import DataRow, TabularSource

FetchCallback = Callable[[], TabularSource]
RowCallback = Callable[[DataRow], None]


@runtime_checkable
class RecordPersistence(Protocol):
    """
    Capability set a store can bind to.

    `fetch` returns a tabular result with named columns: a `DataTable` or any
    iterable of mappings. The row callbacks receive the live cached row;
    `on_add` may write a storage-assigned identity back into `row["Id"]`.
    """

    def fetch(self) -> TabularSource:
        ...

    def on_add(self, row: DataRow) -> None:
        ...

    def on_update(self, row: DataRow) -> None:
        ...

    def on_delete(self, row: DataRow) -> None:
        ...


class AbstractRecordPersistence(abc.ABC):
    """
    Optional ABC helper for class-based implementations.
    """

    @abc.abstractmethod
    def fetch(self) -> TabularSource:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def on_add(self, row: DataRow) -> None:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def on_update(self, row: DataRow) -> None:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def on_delete(self, row: DataRow) -> None:  # pragma: no cover - interface only
        raise NotImplementedError


__all__ = [
    "AbstractRecordPersistence",
    "FetchCallback",
    "RecordPersistence",
    "RowCallback",
]
