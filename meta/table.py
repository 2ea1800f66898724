"""
meta/table.py
-------------
Renders INSERT/UPDATE/DELETE/SELECT text for one table.

Every statement keys on an ``id`` column. When the table carries a
``deactivated`` marker, reads and updates skip deactivated rows and
deletes only flip the marker. Placeholders appear in the order the caller
must bind them:

    INSERT  key, body values
    UPDATE  body values, key
    DELETE  key
    SELECT  key (single row) or filter values, limit, offset (all rows)
"""

import re
from typing import Iterable, Mapping, Optional, Sequence

from db.errors import InvalidFieldError
from db.types import MYSQL, Dialect, PrimaryKeyType, WireType
from meta.filter import FilterCondition, unique_conditions

ID_COLUMN = "id"
DEACTIVATED_COLUMN = "deactivated"


class TableMetaData:
    """Immutable description of a table and the SQL built against it."""

    def __init__(
        self,
        table_name: str,
        column_def: Mapping[str, WireType],
        pk_type: PrimaryKeyType = PrimaryKeyType.VARCHAR,
        deactivated_flag: bool = False,
        dialect: Dialect = MYSQL,
    ):
        self._table_name = table_name
        self._column_def = dict(column_def)
        self._pk_type = pk_type
        self._deactivated_flag = deactivated_flag
        self._dialect = dialect
        quote = re.escape(dialect.quote)
        self._sort_token = re.compile(
            rf"^(?P<q>{quote}?)(?P<col>[A-Za-z_][A-Za-z0-9_]*)(?P=q)(?:\s+(?P<dir>ASC|DESC))?$",
            re.IGNORECASE,
        )

    @property
    def table_name(self) -> str:
        return self._table_name

    @property
    def column_def(self) -> dict[str, WireType]:
        """A copy of the column definitions, in declaration order."""
        return dict(self._column_def)

    @property
    def pk_type(self) -> PrimaryKeyType:
        return self._pk_type

    @property
    def deactivated_flag(self) -> bool:
        return self._deactivated_flag

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    def column_type(self, column: str) -> WireType:
        """
        Wire type of ``column``.

        Raises:
            InvalidFieldError: If the table has no such column.
        """
        try:
            return self._column_def[column]
        except KeyError:
            raise InvalidFieldError(self._table_name, column) from None

    def _q(self, name: str) -> str:
        return self._dialect.ident(name)

    # ── Write statements ──────────────────────────────────

    def gen_insert_sql(self, columns: Iterable[str], auto_generated_key: bool = False) -> str:
        """
        Build an INSERT for ``columns``.

        Args:
            columns: Body columns, in bind order.
            auto_generated_key: Leave ``id`` out and let the database assign it.

        Raises:
            InvalidFieldError: If any column is unknown.
        """
        names = [] if auto_generated_key else [self._q(ID_COLUMN)]
        for col in columns:
            self.column_type(col)
            names.append(self._q(col))
        ph = self._dialect.placeholders(len(names))
        return f"INSERT INTO {self._table_name} ({','.join(names)}) VALUES ({ph})"

    def gen_update_sql(self, columns: Iterable[str]) -> str:
        """
        Build an UPDATE of ``columns`` for one key; the key placeholder is last.

        Raises:
            InvalidFieldError: If any column is unknown or none are given.
        """
        ph = self._dialect.placeholder
        assignments = []
        for col in columns:
            self.column_type(col)
            assignments.append(f"{self._q(col)}={ph}")
        if not assignments:
            raise InvalidFieldError(self._table_name, "", f"Table `{self._table_name}` has no columns to update")

        sql = f"UPDATE {self._table_name} SET {','.join(assignments)} WHERE {self._q(ID_COLUMN)}={ph}"
        if self._deactivated_flag:
            sql += f" AND {self._q(DEACTIVATED_COLUMN)}=0"
        return sql

    def gen_delete_sql(self) -> str:
        ph = self._dialect.placeholder
        if self._deactivated_flag:
            return (
                f"UPDATE {self._table_name} SET {self._q(DEACTIVATED_COLUMN)}=1 "
                f"WHERE {self._q(DEACTIVATED_COLUMN)}=0 AND {self._q(ID_COLUMN)}={ph}"
            )
        return f"DELETE FROM {self._table_name} WHERE {self._q(ID_COLUMN)}={ph}"

    # ── Select ────────────────────────────────────────────

    def _filter_clause(self, condition: FilterCondition) -> str:
        self.column_type(condition.column_name)
        op = condition.operator
        if op.isalpha():
            op = f" {op} "
        return f"{self._q(condition.column_name)}{op}{self._dialect.placeholder}"

    def _order_by_clause(self, sort_fields: Sequence[str]) -> str:
        rendered = []
        for token in sort_fields:
            match = self._sort_token.match(token.strip()) if isinstance(token, str) else None
            if match is None:
                raise InvalidFieldError(
                    self._table_name, str(token), f"Table `{self._table_name}` cannot sort by {token!r}"
                )
            col = match.group("col")
            self.column_type(col)
            direction = match.group("dir")
            rendered.append(self._q(col) + (f" {direction.upper()}" if direction else ""))
        return " ORDER BY " + ",".join(rendered)

    def gen_select_sql(
        self,
        all_rows: bool,
        filter: Optional[Iterable[FilterCondition]] = None,
        sort_fields: Optional[Sequence[str]] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> str:
        """
        Build a SELECT of ``id`` and every defined column.

        Predicates come in a fixed order: the ``deactivated`` scope, then the
        key (single-row only), then each distinct filter condition in first-seen order.
        ORDER BY, LIMIT and OFFSET apply to all-rows selects only. Sort tokens
        are a column name, optionally quoted, optionally followed by ASC/DESC.

        Raises:
            InvalidFieldError: If a filter or sort column is unknown.
        """
        columns = [self._q(ID_COLUMN)] + [self._q(col) for col in self._column_def]
        sql = f"SELECT {','.join(columns)} FROM {self._table_name}"

        predicates = []
        if self._deactivated_flag:
            predicates.append(f"{self._q(DEACTIVATED_COLUMN)}=0")
        if not all_rows:
            predicates.append(f"{self._q(ID_COLUMN)}={self._dialect.placeholder}")
        if filter is not None:
            predicates.extend(self._filter_clause(condition) for condition in unique_conditions(filter))
        if predicates:
            sql += " WHERE " + " AND ".join(predicates)

        if all_rows:
            if sort_fields:
                sql += self._order_by_clause(sort_fields)
            if limit is not None:
                sql += f" LIMIT {self._dialect.placeholder}"
            if offset is not None:
                sql += f" OFFSET {self._dialect.placeholder}"
        return sql

    def __repr__(self) -> str:
        return (
            f"TableMetaData({self._table_name!r}, columns={list(self._column_def)}, "
            f"pk_type={self._pk_type.name}, deactivated_flag={self._deactivated_flag})"
        )
