"""
db/types.py
-----------
Wire types, primary-key types and SQL dialects shared by the metadata
builders and the statement helper.

Wire type codes follow ``java.sql.Types`` so column and procedure
descriptors stay portable between drivers.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Any


class WireType(IntEnum):
    """How a value is bound to, or decoded from, a statement slot."""

    BIT = -7
    TINYINT = -6
    BIGINT = -5
    LONGVARCHAR = -1
    CHAR = 1
    NUMERIC = 2
    DECIMAL = 3
    INTEGER = 4
    SMALLINT = 5
    FLOAT = 6
    REAL = 7
    DOUBLE = 8
    VARCHAR = 12
    BOOLEAN = 16
    DATE = 91
    TIME = 92
    TIMESTAMP = 93
    OTHER = 1111

    @property
    def is_integer(self) -> bool:
        return self in _INTEGER_TYPES

    @property
    def is_character(self) -> bool:
        return self in _CHARACTER_TYPES

    def adapt(self, value: Any) -> Any:
        """
        Coerce a Python value to what this slot expects.

        ``None`` is returned untouched; temporal and OTHER values pass through.
        """
        if value is None:
            return None
        if self in _INTEGER_TYPES:
            return int(value)
        if self in _CHARACTER_TYPES:
            return str(value)
        if self in _EXACT_TYPES:
            return value if isinstance(value, Decimal) else Decimal(str(value))
        if self in _FLOAT_TYPES:
            return float(value)
        if self in _BOOLEAN_TYPES:
            return bool(value)
        return value


_INTEGER_TYPES = frozenset({WireType.TINYINT, WireType.SMALLINT, WireType.INTEGER, WireType.BIGINT})
_CHARACTER_TYPES = frozenset({WireType.CHAR, WireType.VARCHAR, WireType.LONGVARCHAR})
_EXACT_TYPES = frozenset({WireType.NUMERIC, WireType.DECIMAL})
_FLOAT_TYPES = frozenset({WireType.FLOAT, WireType.REAL, WireType.DOUBLE})
_BOOLEAN_TYPES = frozenset({WireType.BIT, WireType.BOOLEAN})


class PrimaryKeyType(Enum):
    """Type of the ``id`` column; decides how the entity key is bound."""

    VARCHAR = WireType.VARCHAR
    CHAR = WireType.CHAR
    INTEGER = WireType.INTEGER
    BIGINT = WireType.BIGINT

    @property
    def wire_type(self) -> WireType:
        return self.value


@dataclass(frozen=True)
class Dialect:
    """Identifier quoting and placeholder style of a target database."""

    name: str
    quote: str
    placeholder: str

    def ident(self, name: str) -> str:
        return f"{self.quote}{name}{self.quote}"

    def placeholders(self, count: int) -> str:
        return ",".join([self.placeholder] * count)


MYSQL = Dialect("mysql", "`", "?")
POSTGRES = Dialect("postgres", '"', "%s")
