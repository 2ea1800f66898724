"""
processors/base.py
------------------
The per-entity row processor consumed by the models.

A processor projects an application body onto column values and turns
result rows back into application objects, a list result, or a stream.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, Sequence, TextIO, TypeVar

import pandas as pd

from utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
L = TypeVar("L")

FETCH_SIZE = 500


def column_names(description: Optional[Sequence], num_columns: Optional[int] = None) -> list[str]:
    """Column labels from DB-API ``cursor.description``."""
    names = [col[0] for col in (description or ())]
    return names if num_columns is None else names[:num_columns]


def iter_rows(cursor, size: int = FETCH_SIZE):
    """Yield every remaining row of ``cursor`` in ``fetchmany`` chunks."""
    while True:
        rows = cursor.fetchmany(size)
        if not rows:
            return
        yield from rows


class DataProcessor(ABC, Generic[T, L]):
    """Row mapping for one entity type: body ``T``, list result ``L``."""

    @abstractmethod
    def body_as_map(self, body: T) -> dict[str, Any]:
        """Column name -> value for the fields present in ``body``."""

    @abstractmethod
    def read_row(self, row: tuple, description: Sequence, num_columns: int) -> T:
        ...

    @abstractmethod
    def read_all(self, cursor, description: Sequence, num_columns: int) -> L:
        ...

    @abstractmethod
    def write_rows(self, out: TextIO, cursor, description: Sequence, num_columns: int) -> None:
        """Stream every remaining row of ``cursor`` into ``out``."""


class CsvStreamMixin:
    """``write_rows`` as CSV, one pandas chunk per ``fetchmany`` batch."""

    fetch_size: int = FETCH_SIZE

    def write_rows(self, out: TextIO, cursor, description: Sequence, num_columns: int) -> None:
        names = column_names(description, num_columns)
        written = 0
        first = True
        while True:
            rows = cursor.fetchmany(self.fetch_size)
            if rows or first:
                chunk = pd.DataFrame([tuple(r)[:num_columns] for r in rows], columns=names)
                chunk.to_csv(out, header=first, index=False)
                written += len(rows)
                first = False
            if not rows:
                break
        logger.debug(f"Streamed {written} rows as CSV")
