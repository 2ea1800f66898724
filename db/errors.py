"""
db/errors.py
------------
Exceptions raised by the data-access layer.
Every failure aborts the call in progress; nothing here is retried.
"""


class DataAccessError(RuntimeError):
    """Base class for all data-access failures."""


class ConfigurationError(DataAccessError):
    """An operation was invoked with neither a procedure nor a table registered."""


class InvalidFieldError(DataAccessError):
    """A body, filter or order-by column is not part of the table definition."""

    def __init__(self, table_name: str, field: str, message: str = None):
        self.table_name = table_name
        self.field = field
        super().__init__(message or f"Table `{table_name}` does not contain field `{field}`")


class NoDataFoundError(DataAccessError):
    """A single-row read returned no rows."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"No data found for key {key!r}")


class MalformedOptionsError(DataAccessError):
    """A list options entry has the wrong shape."""


class StoreExecutionError(DataAccessError):
    """The underlying database rejected or failed a statement."""
