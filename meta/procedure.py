"""
meta/procedure.py
-----------------
Stored-procedure descriptors and their bind-slot layout.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from db.types import MYSQL, POSTGRES, Dialect, WireType


class CallMode(Enum):
    """What the caller expects back from a call."""

    PROCEDURE = "procedure"  # side effects only
    FUNCTION = "function"    # one scalar
    QUERY = "query"          # a result set


@dataclass(frozen=True)
class ProcParam:
    name: str
    type: WireType


@dataclass(frozen=True)
class SlotMap:
    """
    Bind positions for one call.

    Attributes:
        return_slot: Position of the out parameter, or None.
        param_slots: ``(position, param)`` for every input, in declaration order.
    """
    return_slot: Optional[int]
    param_slots: tuple[tuple[int, ProcParam], ...]

    @property
    def size(self) -> int:
        return len(self.param_slots) + (1 if self.return_slot is not None else 0)


def assign_slots(params: Sequence[ProcParam], has_return_type: bool) -> SlotMap:
    """The return value takes slot 1 when present; inputs follow in order."""
    start = 2 if has_return_type else 1
    return SlotMap(
        return_slot=1 if has_return_type else None,
        param_slots=tuple((start + i, param) for i, param in enumerate(params)),
    )


@dataclass(frozen=True)
class ProcMetaData:
    """A stored procedure or function: name, inputs and optional return type."""
    name: str
    params: tuple[ProcParam, ...] = ()
    return_type: Optional[WireType] = None
    dialect: Dialect = MYSQL

    def __post_init__(self):
        # accept any sequence, store a tuple
        object.__setattr__(self, "params", tuple(self.params))

    def slots(self) -> SlotMap:
        return assign_slots(self.params, self.return_type is not None)

    def gen_procedure_call(self, mode: CallMode = CallMode.PROCEDURE) -> str:
        """
        Render the call text for ``mode``.

        JDBC-style dialects use the ``{? = call name(?)}`` escape regardless
        of mode. PostgreSQL calls functions with SELECT, procedures with CALL
        and set-returning functions with ``SELECT * FROM``.
        """
        args = self.dialect.placeholders(len(self.params))
        if self.dialect == POSTGRES:
            if mode is CallMode.QUERY:
                return f"SELECT * FROM {self.name}({args})"
            if self.return_type is not None:
                return f"SELECT {self.name}({args})"
            return f"CALL {self.name}({args})"

        ph = self.dialect.placeholder
        if self.return_type is not None:
            return f"{{{ph} = call {self.name}({args})}}"
        return f"{{call {self.name}({args})}}"
