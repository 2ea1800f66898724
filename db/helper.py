"""
db/helper.py
------------
Statement-execution contract consumed by the models, and its psycopg2
implementation.

A ``Statement`` is prepared from SQL text, bound by 1-based position,
executed once, and closed. Use it as a context manager: a clean exit
commits, an exception rolls back, and either way the cursor is closed
and the connection goes back to the pool.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

import psycopg2

from db.connection import get_connection, release_connection
from db.errors import StoreExecutionError
from db.types import POSTGRES, Dialect, WireType
from utils.logger import get_logger

logger = get_logger(__name__)


class Statement(ABC):
    """
    A parameterized statement with positional binding.

    Subclasses provide the execution primitives; this base keeps the
    bind bookkeeping so every driver sees the same slot contract.
    """

    def __init__(self, sql: str):
        self.sql = sql
        self._params: dict[int, tuple[Any, WireType]] = {}
        self._out_params: dict[int, WireType] = {}
        self._out_values: dict[int, Any] = {}

    # ── Binding ───────────────────────────────────────────

    def set_object(self, position: int, value: Any, wire_type: WireType) -> None:
        """Bind ``value`` at ``position``, coerced to ``wire_type``."""
        self._check_position(position)
        self._params[position] = (wire_type.adapt(value), wire_type)

    def set_null(self, position: int, wire_type: WireType) -> None:
        """Bind an explicit SQL NULL of ``wire_type`` at ``position``."""
        self._check_position(position)
        self._params[position] = (None, wire_type)

    def register_out_parameter(self, position: int, wire_type: WireType) -> None:
        """Reserve ``position`` for a value produced by the call."""
        self._check_position(position)
        self._out_params[position] = wire_type

    def _check_position(self, position: int) -> None:
        if position < 1:
            raise ValueError(f"Parameter positions start at 1, got {position}")

    def bound_values(self) -> list:
        """
        Input values in placeholder order, skipping out-parameter slots.

        Raises:
            ValueError: If an input slot between 1 and the highest bound
                position was never bound.
        """
        slots = set(self._params) | set(self._out_params)
        if not slots:
            return []
        values = []
        for position in range(1, max(slots) + 1):
            if position in self._out_params:
                continue
            if position not in self._params:
                raise ValueError(f"Parameter {position} was not bound for: {self.sql}")
            values.append(self._params[position][0])
        return values

    def get_object(self, position: int) -> Any:
        """Value of a registered out parameter after ``execute()``."""
        if position not in self._out_params:
            raise ValueError(f"Parameter {position} is not an out parameter")
        return self._out_values.get(position)

    # ── Execution ─────────────────────────────────────────

    @abstractmethod
    def execute_update(self) -> int:
        """Run a write statement and return the affected-row count."""

    @abstractmethod
    def execute_query(self) -> "Statement":
        """Run a query; rows are then read with ``fetchone``/``fetchmany``."""

    @abstractmethod
    def execute(self) -> None:
        """Run a call, filling any registered out parameters."""

    @property
    @abstractmethod
    def rowcount(self) -> int:
        """Rows affected by the last execution, or -1 if unknown."""

    @property
    @abstractmethod
    def description(self) -> Optional[Sequence]:
        """DB-API column metadata of the current result set."""

    @abstractmethod
    def fetchone(self) -> Optional[tuple]:
        ...

    @abstractmethod
    def fetchmany(self, size: int) -> list[tuple]:
        ...

    @abstractmethod
    def close(self, commit: bool = True) -> None:
        """Release the cursor and connection."""

    def __enter__(self) -> "Statement":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close(commit=exc_type is None)


class Helper(ABC):
    """Factory for statements against one database."""

    dialect: Dialect

    @abstractmethod
    def prepare_call(self, sql: str) -> Statement:
        ...


class Psycopg2Statement(Statement):
    """Statement executed on a pooled psycopg2 connection."""

    def __init__(self, sql: str):
        super().__init__(sql)
        self._conn = None
        self._cur = None

    def _run(self) -> None:
        if self._cur is not None:
            raise RuntimeError("Statement already executed")
        params = self.bound_values()
        try:
            self._conn = get_connection()
            self._cur = self._conn.cursor()
            logger.debug(f"Executing: {self.sql} | {len(params)} params")
            self._cur.execute(self.sql, params)
        except psycopg2.Error as e:
            logger.error(f"Statement failed: {self.sql} | {e}")
            raise StoreExecutionError(f"Statement failed: {e}") from e

    def execute_update(self) -> int:
        self._run()
        return self._cur.rowcount

    def execute_query(self) -> "Psycopg2Statement":
        self._run()
        return self

    def execute(self) -> None:
        self._run()
        if not self._out_params:
            return
        row = self.fetchone()
        if row is None:
            raise StoreExecutionError(f"Call returned no value: {self.sql}")
        for value, position in zip(row, sorted(self._out_params)):
            self._out_values[position] = value

    @property
    def rowcount(self) -> int:
        return -1 if self._cur is None else self._cur.rowcount

    @property
    def description(self) -> Optional[Sequence]:
        return None if self._cur is None else self._cur.description

    def fetchone(self) -> Optional[tuple]:
        try:
            return self._cur.fetchone()
        except psycopg2.Error as e:
            logger.error(f"Fetch failed: {self.sql} | {e}")
            raise StoreExecutionError(f"Fetch failed: {e}") from e

    def fetchmany(self, size: int) -> list[tuple]:
        try:
            return self._cur.fetchmany(size)
        except psycopg2.Error as e:
            logger.error(f"Fetch failed: {self.sql} | {e}")
            raise StoreExecutionError(f"Fetch failed: {e}") from e

    def close(self, commit: bool = True) -> None:
        if self._conn is None:
            return
        try:
            if self._cur is not None:
                self._cur.close()
            if commit:
                self._conn.commit()
            else:
                self._conn.rollback()
        except psycopg2.Error as e:
            logger.error(f"Failed to close statement: {self.sql} | {e}")
            raise StoreExecutionError(f"Failed to close statement: {e}") from e
        finally:
            release_connection(self._conn)
            self._conn = None
            self._cur = None


class Psycopg2Helper(Helper):
    """Prepares statements on the shared ``db.connection`` pool."""

    dialect = POSTGRES

    def prepare_call(self, sql: str) -> Psycopg2Statement:
        return Psycopg2Statement(sql)
