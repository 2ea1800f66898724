"""
repositories/api_model.py
-------------------------
Facade that serves each CRUD operation either through a registered stored
procedure or through the table-backed model.

Every operation resolves to one strategy:

    ProcedureStrategy  a procedure was registered for it (always wins)
    TableStrategy      no procedure, but table metadata was supplied
    Unconfigured       neither; calls fail with ConfigurationError

Register procedures before the model is shared between threads; after that
the model holds no mutable state.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, TextIO, Union

from db.errors import ConfigurationError, NoDataFoundError
from db.helper import Helper
from meta.procedure import ProcMetaData
from meta.table import TableMetaData
from processors.base import DataProcessor
from repositories.base import L, Model, T, require_key
from repositories.options import OptionsLike, coerce_options
from repositories.procedure import Procedure
from repositories.table_model import TableModel
from utils.logger import get_logger

logger = get_logger(__name__)

KEY_ARG = "key"


class Operation(Enum):
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
    READ = "read"
    LIST = "list"


@dataclass(frozen=True)
class ProcedureStrategy:
    procedure: Procedure


@dataclass(frozen=True)
class TableStrategy:
    model: TableModel


@dataclass(frozen=True)
class Unconfigured:
    pass


Strategy = Union[ProcedureStrategy, TableStrategy, Unconfigured]


class ApiModel(Model[T, L]):
    """
    Per-operation dispatch between procedures and a table.

    Args:
        helper: Statement factory shared by every strategy.
        processor: Row mapping for the entity type.
        meta: Table metadata; without it only registered procedures work.
    """

    def __init__(self, helper: Helper, processor: DataProcessor[T, L], meta: Optional[TableMetaData] = None):
        self.helper = helper
        self.processor = processor
        self.table_model = TableModel(meta, helper, processor) if meta is not None else None
        fallback = TableStrategy(self.table_model) if self.table_model is not None else Unconfigured()
        self._strategies = {op: fallback for op in Operation}

    # ── Registration ──────────────────────────────────────

    def set_api(self, operation: Operation, proc_meta: ProcMetaData) -> None:
        """Serve ``operation`` through the procedure described by ``proc_meta``."""
        if proc_meta.dialect != self.helper.dialect:
            raise ConfigurationError(
                f"Procedure {proc_meta.name} renders {proc_meta.dialect.name} calls "
                f"but the helper runs {self.helper.dialect.name}"
            )
        self._strategies[operation] = ProcedureStrategy(Procedure(proc_meta, self.helper))
        logger.info(f"Registered {proc_meta.name} for {operation.value}")

    def set_insert_api(self, proc_meta: ProcMetaData) -> None:
        self.set_api(Operation.INSERT, proc_meta)

    def set_update_api(self, proc_meta: ProcMetaData) -> None:
        self.set_api(Operation.UPDATE, proc_meta)

    def set_delete_api(self, proc_meta: ProcMetaData) -> None:
        self.set_api(Operation.DELETE, proc_meta)

    def set_read_api(self, proc_meta: ProcMetaData) -> None:
        self.set_api(Operation.READ, proc_meta)

    def set_list_api(self, proc_meta: ProcMetaData) -> None:
        self.set_api(Operation.LIST, proc_meta)

    def strategy(self, operation: Operation) -> Strategy:
        return self._strategies[operation]

    def _resolve(self, operation: Operation) -> Strategy:
        strategy = self._strategies[operation]
        if isinstance(strategy, Unconfigured):
            raise ConfigurationError(f"No procedure or table configured for {operation.value}")
        return strategy

    def _body_args(self, key: str, body: T) -> dict[str, Any]:
        require_key(key)
        args = dict(self.processor.body_as_map(body))
        args[KEY_ARG] = key
        return args

    # ── Operations ────────────────────────────────────────

    def create(self, key: str, body: T) -> int:
        strategy = self._resolve(Operation.INSERT)
        if isinstance(strategy, ProcedureStrategy):
            return strategy.procedure.execute_call(self._body_args(key, body))
        return strategy.model.create(key, body)

    def update(self, key: str, body: T) -> int:
        strategy = self._resolve(Operation.UPDATE)
        if isinstance(strategy, ProcedureStrategy):
            return strategy.procedure.execute_call(self._body_args(key, body))
        return strategy.model.update(key, body)

    def delete(self, key: str) -> int:
        strategy = self._resolve(Operation.DELETE)
        if isinstance(strategy, ProcedureStrategy):
            require_key(key)
            return strategy.procedure.execute_call({KEY_ARG: key})
        return strategy.model.delete(key)

    def read(self, key: str) -> T:
        strategy = self._resolve(Operation.READ)
        if isinstance(strategy, TableStrategy):
            return strategy.model.read(key)

        require_key(key)
        with strategy.procedure.execute_query({KEY_ARG: key}) as stmnt:
            row = stmnt.fetchone()
            if row is None:
                raise NoDataFoundError(key)
            description = stmnt.description or ()
            return self.processor.read_row(row, description, len(description))

    def list(self, options: OptionsLike = None) -> L:
        strategy = self._resolve(Operation.LIST)
        if isinstance(strategy, TableStrategy):
            return strategy.model.list(options)

        args = coerce_options(options).as_arguments()
        with strategy.procedure.execute_query(args) as stmnt:
            description = stmnt.description or ()
            return self.processor.read_all(stmnt, description, len(description))

    def list_to(self, out: TextIO, options: OptionsLike = None) -> None:
        strategy = self._resolve(Operation.LIST)
        if isinstance(strategy, TableStrategy):
            strategy.model.list_to(out, options)
            return

        args = coerce_options(options).as_arguments()
        with strategy.procedure.execute_query(args) as stmnt:
            description = stmnt.description or ()
            self.processor.write_rows(out, stmnt, description, len(description))
