"""
repositories/table_model.py
---------------------------
Generic table-backed model: builds statements from a TableMetaData and
delegates row mapping to a DataProcessor.
All SQL is generated and validated before a statement is prepared, so an
invalid field never reaches the database.
"""

from typing import Any, Mapping, Optional, TextIO

from db.errors import ConfigurationError, NoDataFoundError
from db.helper import Helper, Statement
from db.types import WireType
from meta.filter import FilterCondition, unique_conditions
from meta.table import TableMetaData
from processors.base import DataProcessor
from repositories.base import L, Model, T, require_key
from repositories.options import ListOptions, OptionsLike, coerce_options
from utils.logger import get_logger

logger = get_logger(__name__)

_PAGING_TYPE = WireType.INTEGER


class TableModel(Model[T, L]):
    """CRUD against one table described by ``meta``."""

    def __init__(self, meta: TableMetaData, helper: Helper, processor: DataProcessor[T, L]):
        if meta.dialect != helper.dialect:
            raise ConfigurationError(
                f"Table `{meta.table_name}` renders {meta.dialect.name} SQL "
                f"but the helper runs {helper.dialect.name}"
            )
        self.meta = meta
        self.helper = helper
        self.processor = processor
        self._column_def = meta.column_def

    # ── Statement preparation ─────────────────────────────

    def _bind_value(self, stmnt: Statement, position: int, column: str, value: Any) -> None:
        wire_type = self._column_def[column]
        if value is None:
            stmnt.set_null(position, wire_type)
        else:
            stmnt.set_object(position, value, wire_type)

    def _bind_key(self, stmnt: Statement, position: int, key: str) -> None:
        stmnt.set_object(position, key, self.meta.pk_type.wire_type)

    def prepare_insert(self, key: str, body: Mapping[str, Any]) -> Statement:
        require_key(key)
        columns = tuple(body)
        stmnt = self.helper.prepare_call(self.meta.gen_insert_sql(columns))
        self._bind_key(stmnt, 1, key)
        for position, col in enumerate(columns, start=2):
            self._bind_value(stmnt, position, col, body[col])
        return stmnt

    def prepare_update(self, key: str, body: Mapping[str, Any]) -> Statement:
        require_key(key)
        columns = tuple(body)
        stmnt = self.helper.prepare_call(self.meta.gen_update_sql(columns))
        for position, col in enumerate(columns, start=1):
            self._bind_value(stmnt, position, col, body[col])
        self._bind_key(stmnt, len(columns) + 1, key)
        return stmnt

    def prepare_delete(self, key: str) -> Statement:
        require_key(key)
        stmnt = self.helper.prepare_call(self.meta.gen_delete_sql())
        self._bind_key(stmnt, 1, key)
        return stmnt

    def filter_conditions(self, options: ListOptions) -> tuple:
        """Equality conditions for ``options.filter``, typed from the column map."""
        if not options.filter:
            return ()
        return unique_conditions(
            FilterCondition(col, "=", value, self.meta.column_type(col))
            for col, value in options.filter.items()
        )

    def prepare_select(
        self,
        key: Optional[str],
        options: Optional[ListOptions] = None,
        all_rows: bool = False,
    ) -> Statement:
        """
        Single-row select for ``key``, or with ``all_rows`` a select of every
        row constrained by ``options``.
        """
        if not all_rows:
            require_key(key)
        options = options or ListOptions()
        conditions = self.filter_conditions(options) if all_rows else ()
        sql = self.meta.gen_select_sql(
            all_rows,
            conditions,
            options.order if all_rows else None,
            options.limit if all_rows else None,
            options.offset if all_rows else None,
        )

        stmnt = self.helper.prepare_call(sql)
        position = 1
        if not all_rows:
            self._bind_key(stmnt, position, key)
            position += 1
        for condition in conditions:
            if condition.value is None:
                stmnt.set_null(position, condition.wire_type)
            else:
                stmnt.set_object(position, condition.value, condition.wire_type)
            position += 1
        if all_rows and options.limit is not None:
            stmnt.set_object(position, options.limit, _PAGING_TYPE)
            position += 1
        if all_rows and options.offset is not None:
            stmnt.set_object(position, options.offset, _PAGING_TYPE)
        return stmnt

    # ── Operations ────────────────────────────────────────

    def create(self, key: str, body: T) -> int:
        with self.prepare_insert(key, self.processor.body_as_map(body)) as stmnt:
            count = stmnt.execute_update()
        logger.info(f"Inserted {count} row(s) into {self.meta.table_name} for key {key}")
        return count

    def update(self, key: str, body: T) -> int:
        with self.prepare_update(key, self.processor.body_as_map(body)) as stmnt:
            return stmnt.execute_update()

    def delete(self, key: str) -> int:
        with self.prepare_delete(key) as stmnt:
            count = stmnt.execute_update()
        if count:
            logger.info(f"Deleted {self.meta.table_name} row {key}")
        return count

    def read(self, key: str) -> T:
        with self.prepare_select(key) as stmnt:
            stmnt.execute_query()
            row = stmnt.fetchone()
            if row is None:
                raise NoDataFoundError(key)
            description = stmnt.description or ()
            return self.processor.read_row(row, description, len(description))

    def list(self, options: OptionsLike = None) -> L:
        with self.prepare_select(None, coerce_options(options), all_rows=True) as stmnt:
            stmnt.execute_query()
            description = stmnt.description or ()
            return self.processor.read_all(stmnt, description, len(description))

    def list_to(self, out: TextIO, options: OptionsLike = None) -> None:
        with self.prepare_select(None, coerce_options(options), all_rows=True) as stmnt:
            stmnt.execute_query()
            description = stmnt.description or ()
            self.processor.write_rows(out, stmnt, description, len(description))

    def __repr__(self) -> str:
        return f"TableModel({self.meta.table_name!r})"
