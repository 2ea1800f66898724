"""
repositories/options.py
-----------------------
Validated options for list queries.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Optional, Union

from db.errors import MalformedOptionsError

FILTER = "filter"
ORDER = "order"
LIMIT = "limit"
OFFSET = "offset"


def _non_negative(name: str, value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise MalformedOptionsError(f"'{name}' must be a non-negative integer, got {value!r}")
    return value


@dataclass(frozen=True)
class ListOptions:
    """
    Constraints for a list call.

    Attributes:
        filter: Column name -> value, each an equality predicate.
        order: Sort tokens such as ``"name"`` or ``"created DESC"``.
        limit: Maximum number of rows.
        offset: Rows to skip.
    """
    filter: Optional[Mapping[str, Any]] = None
    order: Optional[tuple[str, ...]] = None
    limit: Optional[int] = None
    offset: Optional[int] = None

    def __post_init__(self):
        if self.filter is not None:
            if not isinstance(self.filter, Mapping):
                raise MalformedOptionsError(f"'{FILTER}' must be a mapping, got {type(self.filter).__name__}")
            object.__setattr__(self, "filter", MappingProxyType(dict(self.filter)))
        if self.order is not None:
            if isinstance(self.order, (str, bytes)) or not isinstance(self.order, Sequence):
                raise MalformedOptionsError(f"'{ORDER}' must be a list of column names, got {type(self.order).__name__}")
            if not all(isinstance(token, str) for token in self.order):
                raise MalformedOptionsError(f"'{ORDER}' entries must be strings")
            object.__setattr__(self, "order", tuple(self.order))
        _non_negative(LIMIT, self.limit)
        _non_negative(OFFSET, self.offset)

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]]) -> "ListOptions":
        """
        Build from a loose ``{"filter": ..., "order": ...}`` mapping.

        Raises:
            MalformedOptionsError: If an entry has the wrong shape.
        """
        if options is None:
            return cls()
        if not isinstance(options, Mapping):
            raise MalformedOptionsError(f"List options must be a mapping, got {type(options).__name__}")
        return cls(
            filter=options.get(FILTER),
            order=options.get(ORDER),
            limit=options.get(LIMIT),
            offset=options.get(OFFSET),
        )

    def as_arguments(self) -> dict[str, Any]:
        """Named arguments for a list procedure: filter entries plus paging and order."""
        args = dict(self.filter or {})
        if self.order is not None:
            args[ORDER] = ",".join(self.order)
        if self.limit is not None:
            args[LIMIT] = self.limit
        if self.offset is not None:
            args[OFFSET] = self.offset
        return args


OptionsLike = Union[ListOptions, Mapping[str, Any], None]


def coerce_options(options: OptionsLike) -> ListOptions:
    """Accept a ListOptions, a loose mapping, or None."""
    if isinstance(options, ListOptions):
        return options
    return ListOptions.from_mapping(options)
