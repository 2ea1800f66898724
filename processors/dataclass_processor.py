"""
processors/dataclass_processor.py
---------------------------------
Maps a dataclass domain model onto a table row and back.
Fields are matched to columns by name; result columns without a matching
field are ignored.
"""

from dataclasses import fields, is_dataclass
from typing import Any, Iterable, Sequence

from processors.base import CsvStreamMixin, DataProcessor, column_names, iter_rows


class DataclassProcessor(CsvStreamMixin, DataProcessor):
    """
    Processor for a dataclass ``cls``.

    Args:
        cls: The dataclass type rows are built into.
        exclude: Fields never written to the table (the key lives in ``id``).
    """

    def __init__(self, cls: type, exclude: Iterable[str] = ("id",)):
        if not is_dataclass(cls):
            raise TypeError(f"{cls!r} is not a dataclass")
        self.cls = cls
        self.exclude = frozenset(exclude)
        self._field_names = [f.name for f in fields(cls)]

    def body_as_map(self, body) -> dict[str, Any]:
        """Non-excluded, non-None fields of ``body``."""
        if not isinstance(body, self.cls):
            raise TypeError(f"Expected {self.cls.__name__}, got {type(body).__name__}")
        result = {}
        for name in self._field_names:
            value = getattr(body, name)
            if name not in self.exclude and value is not None:
                result[name] = value
        return result

    def _build(self, names: list[str], row: tuple):
        known = set(self._field_names)
        return self.cls(**{name: value for name, value in zip(names, row) if name in known})

    def read_row(self, row: tuple, description: Sequence, num_columns: int):
        return self._build(column_names(description, num_columns), row)

    def read_all(self, cursor, description: Sequence, num_columns: int) -> list:
        names = column_names(description, num_columns)
        return [self._build(names, row) for row in iter_rows(cursor)]
