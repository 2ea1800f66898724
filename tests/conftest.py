"""Pytest configuration and shared fixtures for the data-access tests."""

from __future__ import annotations

from collections import deque
from typing import Any, Optional, Sequence

import pytest

from db.types import MYSQL, PrimaryKeyType, WireType
from db.helper import Helper, Statement
from meta.table import TableMetaData


# =============================================================================
# In-memory statement collaborator
# =============================================================================


class FakeStatement(Statement):
    """Records binds and plays back a scripted result."""

    def __init__(self, sql: str, result: dict):
        super().__init__(sql)
        self.result = result
        self.rows = deque(result.get("rows", []))
        self.executed = None
        self.closed = False
        self.committed = None

    def _run(self, kind: str) -> None:
        self.executed = kind
        error = self.result.get("error")
        if error is not None:
            raise error

    def execute_update(self) -> int:
        self._run("update")
        return self.result.get("rowcount", 0)

    def execute_query(self) -> "FakeStatement":
        self._run("query")
        return self

    def execute(self) -> None:
        self._run("call")
        for position, value in zip(sorted(self._out_params), self.result.get("out", [])):
            self._out_values[position] = value

    @property
    def rowcount(self) -> int:
        return self.result.get("rowcount", -1)

    @property
    def description(self) -> Optional[Sequence]:
        return [(name, None) for name in self.result.get("columns", [])]

    def fetchone(self):
        return self.rows.popleft() if self.rows else None

    def fetchmany(self, size: int):
        batch = []
        while self.rows and len(batch) < size:
            batch.append(self.rows.popleft())
        return batch

    def close(self, commit: bool = True) -> None:
        self.closed = True
        self.committed = commit

    def params(self) -> dict[int, tuple[Any, WireType]]:
        return dict(self._params)

    def out_params(self) -> dict[int, WireType]:
        return dict(self._out_params)


class FakeHelper(Helper):
    """Hands out FakeStatements, each consuming the next queued result."""

    dialect = MYSQL

    def __init__(self):
        self.results: deque = deque()
        self.statements: list[FakeStatement] = []

    def queue(self, **result) -> "FakeHelper":
        self.results.append(result)
        return self

    def prepare_call(self, sql: str) -> FakeStatement:
        result = self.results.popleft() if self.results else {}
        stmnt = FakeStatement(sql, result)
        self.statements.append(stmnt)
        return stmnt

    @property
    def last(self) -> FakeStatement:
        return self.statements[-1]


# =============================================================================
# Fixtures
# =============================================================================


EMPLOYEE_COLUMNS = {
    "empcode": WireType.INTEGER,
    "loginname": WireType.VARCHAR,
    "password": WireType.VARCHAR,
    "loginenabled": WireType.VARCHAR,
}


@pytest.fixture
def column_def() -> dict[str, WireType]:
    return dict(EMPLOYEE_COLUMNS)


@pytest.fixture
def soft_meta(column_def) -> TableMetaData:
    return TableMetaData("test_table", column_def, PrimaryKeyType.VARCHAR, True)


@pytest.fixture
def hard_meta(column_def) -> TableMetaData:
    return TableMetaData("test_table", column_def, PrimaryKeyType.VARCHAR, False)


@pytest.fixture
def helper() -> FakeHelper:
    return FakeHelper()
