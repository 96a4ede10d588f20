"""State and data set equality assertions.

These compare fresh or caller-supplied data directly against an expected
data set. No snapshot is read or written.
"""

from __future__ import annotations

from rowdelta.core.constants import STATE_DATA_LABEL
from rowdelta.core.errors import DeltaAssertionError, DeltaUsageError
from rowdelta.engine.assertion_log import AssertionLog
from rowdelta.engine.assertion_types import DataSetAssertionResult
from rowdelta.engine.delta_assertions import QueryExecutor
from rowdelta.engine.mismatch_report import build_report, render_failure
from rowdelta.model.data_set import DataSet
from rowdelta.model.data_source import DataSource


def assert_equals(
    log: AssertionLog,
    expected: DataSet,
    actual: DataSet,
    message: str | None = None,
) -> DataSetAssertionResult:
    """Assert multiset equality of two data sets.

    Data source identity is ignored; only row values and counts matter.

    Args:
        log: Assertion log.
        expected: Expected data.
        actual: Actual data.
        message: Optional description included in failures.

    Returns:
        Passed assertion result.

    Raises:
        DeltaAssertionError: If the data sets differ.
    """
    result = DataSetAssertionResult(
        expected=expected,
        actual=actual,
        report=build_report(STATE_DATA_LABEL, expected, actual),
        message=message,
    )
    log.record(result)
    if not result.passed:
        raise DeltaAssertionError(render_failure(result), result)
    return result


def assert_state(
    executor: QueryExecutor,
    log: AssertionLog,
    source: DataSource,
    expected: DataSet,
    message: str | None = None,
) -> DataSetAssertionResult:
    """Assert that a source currently holds exactly the expected rows.

    Raises:
        DeltaUsageError: If the expected data belongs to another source.
        DeltaExecutionError: If fetching fresh data fails.
        DeltaAssertionError: If the fresh data differs.
    """
    if expected.source is not source:
        raise DeltaUsageError(
            f"Data source mismatch for expected data: expected {source.describe()}, "
            f"got {expected.source.describe()}."
        )
    actual = executor.fetch(source)
    return assert_equals(log, expected, actual, message)


def assert_empty(
    executor: QueryExecutor,
    log: AssertionLog,
    source: DataSource,
    message: str | None = None,
) -> DataSetAssertionResult:
    """Assert that a source currently holds no rows."""
    return assert_state(executor, log, source, DataSet(source), message)
