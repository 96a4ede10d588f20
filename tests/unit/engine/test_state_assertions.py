"""Unit tests for state and data set equality assertions."""

from __future__ import annotations

import random

import pytest

from rowdelta.core.config import DeltaConfig
from rowdelta.core.errors import DeltaAssertionError, DeltaUsageError
from rowdelta.engine.assertion_log import AssertionLog
from rowdelta.engine.state_assertions import assert_empty, assert_equals, assert_state
from rowdelta.model.data_set import DataSet
from rowdelta.model.data_source import DataSource, query, table
from rowdelta.model.row import Row

USERS = table("users", ["id", "name"])
LOG = AssertionLog(DeltaConfig(log_assertion_errors=False))


class _FakeExecutor:
    def __init__(self, rows: list[tuple[object, ...]]) -> None:
        self._rows = rows

    def fetch(self, source: DataSource) -> DataSet:
        return DataSet.from_rows(source, [Row(values) for values in self._rows])


def _users(*rows: tuple[object, ...]) -> DataSet:
    return DataSet(USERS).rows_from(rows)


def test_assert_equals_is_shuffle_invariant() -> None:
    """Equal multisets pass regardless of row order."""
    rows = [(index % 5, f"n{index % 2}") for index in range(60)]
    shuffled = list(rows)
    random.Random(7).shuffle(shuffled)

    assert assert_equals(LOG, _users(*rows), _users(*shuffled)).passed


def test_assert_equals_fails_on_duplicate_count() -> None:
    """A missing duplicate is reported with exact counts."""
    with pytest.raises(DeltaAssertionError) as raised:
        assert_equals(LOG, _users((1, "a"), (2, "b")), _users((1, "a"), (1, "a"), (2, "b")))

    assert "(1, 'a'): expected 1, found 2" in str(raised.value)


def test_assert_equals_ignores_data_source_identity() -> None:
    """Only values matter when comparing data sets."""
    ids = query("SELECT id, name FROM users", ["id", "name"])
    actual = DataSet(ids).row(1, "a")

    assert assert_equals(LOG, _users((1, "a")), actual).passed


def test_assert_state_compares_fresh_rows() -> None:
    """assert_state fetches the source and compares it to the expectation."""
    executor = _FakeExecutor([(2, "b"), (1, "a")])

    assert assert_state(executor, LOG, USERS, _users((1, "a"), (2, "b"))).passed


def test_assert_state_rejects_expectation_for_other_source() -> None:
    """Expected data bound to another source is a usage error."""
    executor = _FakeExecutor([])
    other = DataSet(table("orders", ["id", "total"]))

    with pytest.raises(DeltaUsageError):
        assert_state(executor, LOG, USERS, other)


def test_assert_empty_fails_when_rows_exist() -> None:
    """assert_empty reports every remaining row as unexpected."""
    executor = _FakeExecutor([(1, "a")])

    with pytest.raises(DeltaAssertionError) as raised:
        assert_empty(executor, LOG, USERS)

    assert raised.value.result.report.unexpected[0].row == Row((1, "a"))
