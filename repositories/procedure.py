"""
repositories/procedure.py
-------------------------
Binds named arguments to a stored procedure's positional slots and runs it.

Arguments are looked up by parameter name. A missing or None argument is
bound as a typed NULL, never rejected; callers that need required
parameters must check them first.
"""

from typing import Any, Mapping, Optional

from db.helper import Helper, Statement
from db.types import WireType
from meta.procedure import CallMode, ProcMetaData
from utils.logger import get_logger

logger = get_logger(__name__)


class Procedure:
    """A callable stored procedure bound to one helper."""

    def __init__(self, meta: ProcMetaData, helper: Helper):
        self.meta = meta
        self.helper = helper
        self.slot_map = meta.slots()

    @property
    def return_type(self) -> Optional[WireType]:
        return self.meta.return_type

    def prepare_call(self, args: Optional[Mapping[str, Any]], mode: CallMode = CallMode.PROCEDURE) -> Statement:
        """Prepare the call text for ``mode`` and bind every slot."""
        stmnt = self.helper.prepare_call(self.meta.gen_procedure_call(mode))

        if self.slot_map.return_slot is not None:
            stmnt.register_out_parameter(self.slot_map.return_slot, self.meta.return_type)

        args = args or {}
        for position, param in self.slot_map.param_slots:
            value = args.get(param.name)
            if value is not None:
                stmnt.set_object(position, value, param.type)
            else:
                stmnt.set_null(position, param.type)

        logger.debug(f"Prepared {self.meta.name} ({mode.value}) with {self.slot_map.size} slots")
        return stmnt

    def _decode(self, stmnt: Statement) -> Any:
        value = stmnt.get_object(self.slot_map.return_slot)
        if value is None:
            return None
        if self.return_type.is_integer:
            return int(value)
        if self.return_type.is_character:
            return str(value)
        return value

    def execute_function(self, args: Optional[Mapping[str, Any]] = None) -> Any:
        """Run the call and return its decoded scalar, or None without a return type."""
        with self.prepare_call(args, CallMode.FUNCTION) as stmnt:
            stmnt.execute()
            if self.return_type is None:
                return None
            return self._decode(stmnt)

    def execute_procedure(self, args: Optional[Mapping[str, Any]] = None) -> None:
        with self.prepare_call(args, CallMode.PROCEDURE) as stmnt:
            stmnt.execute()

    def execute_call(self, args: Optional[Mapping[str, Any]] = None) -> int:
        """
        Run a write call and report how many rows it touched.

        With an integer return type the procedure's own result is the count;
        otherwise the store's row count is returned (-1 if it reports none).
        """
        if self.return_type is not None and self.return_type.is_integer:
            result = self.execute_function(args)
            return 0 if result is None else result
        with self.prepare_call(args, CallMode.PROCEDURE) as stmnt:
            stmnt.execute()
            return stmnt.rowcount

    def execute_query(self, args: Optional[Mapping[str, Any]] = None) -> Statement:
        """
        Run the call and return the open statement positioned on its rows.

        The caller owns the statement and must close it, normally with ``with``.
        """
        stmnt = self.prepare_call(args, CallMode.QUERY)
        try:
            return stmnt.execute_query()
        except Exception:
            stmnt.close(commit=False)
            raise

    def __repr__(self) -> str:
        return f"Procedure({self.meta.name!r})"
