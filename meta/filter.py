"""
meta/filter.py
--------------
One comparison predicate of a list query.
"""

from dataclasses import dataclass
from typing import Any, Iterable

from db.types import WireType

OPERATORS = frozenset({"=", "<>", "!=", "<", "<=", ">", ">=", "LIKE"})


@dataclass(frozen=True)
class FilterCondition:
    """
    ``<column_name><operator>?`` bound to ``value`` as ``wire_type``.

    Equality covers all four fields, so identical predicates collapse while
    two operators on the same column both survive.
    """
    column_name: str
    operator: str
    value: Any
    wire_type: WireType

    def __post_init__(self):
        if self.operator not in OPERATORS:
            raise ValueError(f"Unsupported filter operator: {self.operator!r}")


def unique_conditions(conditions: Iterable[FilterCondition]) -> tuple[FilterCondition, ...]:
    """Drop duplicate conditions, keeping first-seen order."""
    return tuple(dict.fromkeys(conditions))
