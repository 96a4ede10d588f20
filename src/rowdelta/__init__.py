"""Public SDK surface for rowdelta.

This module provides a stable import path for test suites.
It re-exports the database handle, data models, and error types.
"""

from __future__ import annotations

from rowdelta.core.config import DeltaConfig
from rowdelta.core.errors import (
    DeltaAssertionError,
    DeltaConfigError,
    DeltaDependencyError,
    DeltaError,
    DeltaExecutionError,
    DeltaUsageError,
)
from rowdelta.db.database import Database
from rowdelta.engine.assertion_log import AssertionLog
from rowdelta.engine.assertion_types import (
    DataSetAssertionResult,
    DeltaAssertionResult,
    MismatchReport,
    RowDiscrepancy,
)
from rowdelta.engine.state_assertions import assert_equals as _assert_equals
from rowdelta.model.data_set import DataSet, copy_of, first, join, last, singleton, subset
from rowdelta.model.data_source import DataSource, query, table
from rowdelta.model.row import Row

__all__ = [
    "DataSet",
    "DataSetAssertionResult",
    "DataSource",
    "Database",
    "DeltaAssertionError",
    "DeltaAssertionResult",
    "DeltaConfig",
    "DeltaConfigError",
    "DeltaDependencyError",
    "DeltaError",
    "DeltaExecutionError",
    "DeltaUsageError",
    "MismatchReport",
    "Row",
    "RowDiscrepancy",
    "assert_equals",
    "copy_of",
    "first",
    "join",
    "last",
    "query",
    "singleton",
    "subset",
    "table",
]


def assert_equals(
    expected: DataSet,
    actual: DataSet,
    message: str | None = None,
    config: DeltaConfig | None = None,
) -> DataSetAssertionResult:
    """Assert multiset equality of two data sets without a database handle.

    Args:
        expected: Expected data.
        actual: Actual data.
        message: Optional description included in failures.
        config: Logging configuration; read from env when omitted.

    Returns:
        Passed assertion result.

    Raises:
        DeltaAssertionError: If the data sets differ.
    """
    log = AssertionLog(config or DeltaConfig.from_env())
    return _assert_equals(log, expected, actual, message)
