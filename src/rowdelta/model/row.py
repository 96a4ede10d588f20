"""Immutable database row with value-based equality.

Rows compare through a normalized key so that values of different numeric
widths, binary buffer types, and nulls never cause spurious mismatches.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Iterable, Iterator

from rowdelta.core.errors import DeltaUsageError

if TYPE_CHECKING:
    from rowdelta.model.data_source import DataSource


class _NaN:
    """Comparison stand-in for float and decimal NaN, equal only to itself."""

    _instance: "_NaN | None" = None

    def __new__(cls) -> "_NaN":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "nan"


_NAN = _NaN()


class Row:
    """Ordered tuple of column values.

    Two rows are equal iff they have the same arity and every pair of
    corresponding values is equal. Null only equals null.
    """

    __slots__ = ("_values", "_key", "_hash")

    def __init__(self, values: Iterable[Any]) -> None:
        self._values = tuple(values)
        self._key = tuple(_comparable(value) for value in self._values)
        self._hash = hash(self._key)

    @classmethod
    def for_source(cls, source: "DataSource", values: Iterable[Any]) -> "Row":
        """Build a row checked against a data source's arity.

        Args:
            source: Data source the row belongs to.
            values: Column values in column order.

        Returns:
            New row.

        Raises:
            DeltaUsageError: If the number of values differs from the column count.
        """
        return cls(values).checked_for(source)

    def checked_for(self, source: "DataSource") -> "Row":
        """Return this row after checking it against a data source's arity.

        Raises:
            DeltaUsageError: If the number of values differs from the column count.
        """
        if len(self) != source.column_count:
            raise DeltaUsageError(
                f"{source.column_count} columns expected for {source.describe()}, "
                f"not {len(self)}."
            )
        return self

    @property
    def values(self) -> tuple[Any, ...]:
        """Original column values."""
        return self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._values)

    def __getitem__(self, index: int) -> Any:
        return self._values[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Row):
            return NotImplemented
        return self._hash == other._hash and self._key == other._key

    def __hash__(self) -> int:
        return self._hash

    def __repr__(self) -> str:
        return repr(self._values)


def _comparable(value: Any) -> Any:
    """Normalize one column value for equality and hashing.

    Args:
        value: Raw column value.

    Returns:
        Hashable value with equal normalized forms for equal data.

    Raises:
        DeltaUsageError: If the value cannot be hashed.
    """
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return _NAN
    if isinstance(value, Decimal) and value.is_nan():
        return _NAN
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, (list, tuple)):
        return tuple(_comparable(item) for item in value)
    try:
        hash(value)
    except TypeError as error:
        raise DeltaUsageError(
            f"Unsupported column value of type {type(value).__name__}: "
            "row values must be hashable scalars, sequences, or binary data."
        ) from error
    return value
