"""Unit tests for data set construction and derivation."""

from __future__ import annotations

import pytest

from rowdelta.core.errors import DeltaUsageError
from rowdelta.engine.multiset_diff import count_rows
from rowdelta.model.data_set import DataSet, copy_of, first, join, last, singleton, subset
from rowdelta.model.data_source import table
from rowdelta.model.row import Row

USERS = table("users", ["id", "name"])


def _users(*rows: tuple[int, str]) -> DataSet:
    return DataSet(USERS).rows_from(rows)


def test_row_appends_in_order() -> None:
    """Rows should keep insertion order for display."""
    data = DataSet(USERS).row(1, "a").row(2, "b")

    assert data.rows == (Row((1, "a")), Row((2, "b"))) and len(data) == 2


def test_row_rejects_wrong_arity() -> None:
    """Appending a row with the wrong arity fails immediately."""
    with pytest.raises(DeltaUsageError):
        DataSet(USERS).row(1)


def test_from_rows_rejects_wrong_arity() -> None:
    """Prebuilt rows are checked against the source's column count."""
    with pytest.raises(DeltaUsageError, match="2 columns expected"):
        DataSet.from_rows(USERS, [Row((1, "a")), Row((1,))])


def test_rows_from_is_all_or_nothing() -> None:
    """A bulk append with one bad row adds nothing."""
    data = _users((1, "a"))

    with pytest.raises(DeltaUsageError):
        data.rows_from([(2, "b"), (3,)])  # type: ignore[list-item]

    assert len(data) == 1


def test_read_only_rejects_every_mutation_and_keeps_rows() -> None:
    """A read-only data set stays unmodified after mutation attempts."""
    data = _users((1, "a")).set_read_only()
    attempts = (
        lambda: data.row(2, "b"),
        lambda: data.rows_from([(3, "c")]),
        lambda: data.add(_users((4, "d"))),
    )

    for attempt in attempts:
        with pytest.raises(DeltaUsageError, match="read-only"):
            attempt()

    assert data.is_read_only and data.rows == (Row((1, "a")),)


def test_add_rejects_other_source() -> None:
    """Merging data from a different source is a usage error."""
    other = DataSet(table("users", ["id", "name"])).row(1, "a")

    with pytest.raises(DeltaUsageError, match="mismatch"):
        _users().add(other)


def test_subset_helpers_select_contiguous_rows() -> None:
    """first, last, singleton, and subset pick rows by position."""
    data = _users((1, "a"), (2, "b"), (3, "c"), (4, "d"))

    assert (
        first(data, 2).rows == data.rows[:2]
        and last(data, 1).rows == data.rows[3:]
        and singleton(data, 2).rows == (Row((3, "c")),)
        and subset(data, 1, 2).rows == data.rows[1:3]
        and subset(data, 4, 0).is_empty
    )


@pytest.mark.parametrize(
    "derive",
    [
        lambda data: subset(data, -1, 1),
        lambda data: subset(data, 2, 2),
        lambda data: singleton(data, 3),
        lambda data: first(data, 4),
        lambda data: last(data, 4),
        lambda data: last(data, -1),
    ],
)
def test_subset_helpers_reject_out_of_range(derive) -> None:
    """Out-of-range positions are usage errors."""
    data = _users((1, "a"), (2, "b"), (3, "c"))

    with pytest.raises(DeltaUsageError):
        derive(data)


def test_derived_sets_are_writable_copies() -> None:
    """Derivations of a read-only set are new writable sets."""
    data = _users((1, "a")).set_read_only()
    copy = copy_of(data).row(2, "b")

    assert not copy.is_read_only and len(copy) == 2 and len(data) == 1


def test_join_is_multiset_union() -> None:
    """join sums sizes and multiplicities."""
    left = _users((1, "a"), (2, "b"))
    right = _users((2, "b"), (3, "c"))

    joined = join(left, right)

    assert len(joined) == len(left) + len(right) and count_rows(joined) == (
        count_rows(left) + count_rows(right)
    )


def test_join_requires_same_source_and_input() -> None:
    """join fails without inputs or with mixed sources."""
    other = DataSet(table("orders", ["id", "total"])).row(1, 10)

    with pytest.raises(DeltaUsageError):
        join()
    with pytest.raises(DeltaUsageError):
        join(_users((1, "a")), other)
