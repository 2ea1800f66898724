"""
processors/dict_processor.py
----------------------------
Plain-dict bodies and rows.
"""

from typing import Any, Sequence

from processors.base import CsvStreamMixin, DataProcessor, column_names, iter_rows


class DictProcessor(CsvStreamMixin, DataProcessor[dict, list]):
    """Bodies are dicts; rows become dicts keyed by column label."""

    def body_as_map(self, body: dict) -> dict[str, Any]:
        # None means "not supplied"
        return {col: value for col, value in body.items() if value is not None}

    def read_row(self, row: tuple, description: Sequence, num_columns: int) -> dict:
        return dict(zip(column_names(description, num_columns), row))

    def read_all(self, cursor, description: Sequence, num_columns: int) -> list[dict]:
        names = column_names(description, num_columns)
        return [dict(zip(names, row)) for row in iter_rows(cursor)]
