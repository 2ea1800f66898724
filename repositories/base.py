"""
repositories/base.py
--------------------
The uniform CRUD contract every model implements.
"""

from abc import ABC, abstractmethod
from typing import Generic, TextIO, TypeVar

from repositories.options import OptionsLike

T = TypeVar("T")
L = TypeVar("L")


def require_key(key) -> None:
    """
    Raises:
        ValueError: If ``key`` is None; single-row operations always target one key.
    """
    if key is None:
        raise ValueError("A key is required for single-row operations")


class Model(ABC, Generic[T, L]):
    """
    Create/read/update/delete/list by string key.

    Write operations return the affected-row count. A count of -1 means the
    store did not report one (a PostgreSQL ``CALL`` without an integer
    return type).
    """

    @abstractmethod
    def create(self, key: str, body: T) -> int:
        """Insert ``body`` under ``key``; returns the affected-row count, or -1 if unknown."""

    @abstractmethod
    def update(self, key: str, body: T) -> int:
        """Update the row for ``key``; 0 means no matching active row, -1 count unknown."""

    @abstractmethod
    def delete(self, key: str) -> int:
        """Delete the row for ``key``; returns the affected-row count, or -1 if unknown."""

    @abstractmethod
    def read(self, key: str) -> T:
        """
        Raises:
            NoDataFoundError: If no row matches ``key``.
        """

    @abstractmethod
    def list(self, options: OptionsLike = None) -> L:
        ...

    @abstractmethod
    def list_to(self, out: TextIO, options: OptionsLike = None) -> None:
        """Stream every matching row into ``out``."""
