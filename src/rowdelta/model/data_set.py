"""Data set model.

A data set is a multiset of rows bound to one data source. Rows keep their
insertion order for display, but order never matters for comparisons.
Once marked read-only a data set freezes its rows and rejects mutation.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Sequence

from rowdelta.core.errors import DeltaUsageError
from rowdelta.model.data_source import DataSource
from rowdelta.model.row import Row


class DataSet:
    """Multiset of rows bound to a single data source."""

    def __init__(self, source: DataSource) -> None:
        """Create an empty, writable data set.

        Args:
            source: Data source every row must conform to.
        """
        self._source = source
        self._rows: list[Row] | tuple[Row, ...] = []

    @classmethod
    def from_rows(cls, source: DataSource, rows: Iterable[Row]) -> "DataSet":
        """Build a data set from existing rows.

        Args:
            source: Data source for the data set.
            rows: Rows to include, in display order.

        Returns:
            New writable data set.

        Raises:
            DeltaUsageError: If any row has the wrong arity for the source.
        """
        data = cls(source)
        data._writable_rows().extend([row.checked_for(source) for row in rows])
        return data

    @property
    def source(self) -> DataSource:
        """Data source this data set is bound to."""
        return self._source

    @property
    def is_read_only(self) -> bool:
        """Whether the data set has been frozen."""
        return isinstance(self._rows, tuple)

    @property
    def rows(self) -> tuple[Row, ...]:
        """Rows in insertion order."""
        return tuple(self._rows)

    @property
    def is_empty(self) -> bool:
        """Whether the data set has no rows."""
        return not self._rows

    def set_read_only(self) -> "DataSet":
        """Freeze the data set. This cannot be undone.

        Returns:
            The data set, for chained calls.
        """
        self._rows = tuple(self._rows)
        return self

    def row(self, *values: Any) -> "DataSet":
        """Append one row.

        Args:
            values: Column values in column order.

        Returns:
            The data set, for chained calls.

        Raises:
            DeltaUsageError: If read-only or the arity is wrong.
        """
        rows = self._writable_rows()
        rows.append(Row.for_source(self._source, values))
        return self

    def rows_from(self, rows: Iterable[Sequence[Any]]) -> "DataSet":
        """Append many rows.

        All rows are validated before any is added.

        Args:
            rows: Column value sequences.

        Returns:
            The data set, for chained calls.

        Raises:
            DeltaUsageError: If read-only or any row has the wrong arity.
        """
        target = self._writable_rows()
        target.extend([Row.for_source(self._source, values) for values in rows])
        return self

    def add(self, other: "DataSet") -> "DataSet":
        """Append every row of another data set of the same source.

        Args:
            other: Data set to merge in.

        Returns:
            The data set, for chained calls.

        Raises:
            DeltaUsageError: If read-only or the data sources differ.
        """
        target = self._writable_rows()
        _require_same_source(self._source, other)
        target.extend(other._rows)
        return self

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self._rows)

    def __repr__(self) -> str:
        return f"DataSet({self._source.describe()}, rows={list(self._rows)!r})"

    def _writable_rows(self) -> list[Row]:
        if isinstance(self._rows, tuple):
            raise DeltaUsageError(
                f"Data set for {self._source.describe()} is read-only."
            )
        return self._rows


def subset(data: DataSet, start: int, count: int) -> DataSet:
    """Create a data set with a contiguous range of rows.

    Args:
        data: Source data set.
        start: Index of the first row, from 0.
        count: Number of rows.

    Returns:
        New writable data set with the selected rows.

    Raises:
        DeltaUsageError: If the range falls outside the data set.
    """
    if start < 0 or count < 0 or start + count > len(data):
        raise DeltaUsageError(
            f"Invalid range: start={start}, count={count} for a data set of {len(data)} rows."
        )
    return DataSet.from_rows(data.source, data.rows[start : start + count])


def singleton(data: DataSet, index: int) -> DataSet:
    """Create a data set holding the row at one index."""
    return subset(data, index, 1)


def first(data: DataSet, count: int) -> DataSet:
    """Create a data set with the first ``count`` rows."""
    return subset(data, 0, count)


def last(data: DataSet, count: int) -> DataSet:
    """Create a data set with the last ``count`` rows."""
    if count < 0:
        raise DeltaUsageError(f"Invalid row count: {count}.")
    return subset(data, len(data) - count, count)


def copy_of(data: DataSet) -> DataSet:
    """Create a writable copy of a data set."""
    return DataSet.from_rows(data.source, data.rows)


def join(*data_sets: DataSet) -> DataSet:
    """Create a data set with the rows of several same-source data sets.

    Args:
        data_sets: Data sets to join, in order.

    Returns:
        New writable data set with all rows.

    Raises:
        DeltaUsageError: If no data sets are given or their sources differ.
    """
    if not data_sets:
        raise DeltaUsageError("No data sets given for joining.")
    joined = copy_of(data_sets[0])
    for other in data_sets[1:]:
        joined.add(other)
    return joined


def _require_same_source(source: DataSource, other: DataSet) -> None:
    if other.source is not source:
        raise DeltaUsageError(
            f"Data source mismatch: expected {source.describe()}, "
            f"got {other.source.describe()}."
        )
