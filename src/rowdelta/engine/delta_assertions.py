"""Delta assertions against recorded snapshots.

A delta assertion fetches fresh data for a source, computes the multiset
difference from the source's snapshot, and checks it against the rows the
caller expected to disappear (old) and appear (new).
"""

from __future__ import annotations

from typing import Protocol

from rowdelta.core.config import DeltaConfig
from rowdelta.core.constants import NEW_DATA_LABEL, OLD_DATA_LABEL
from rowdelta.core.errors import DeltaAssertionError, DeltaUsageError
from rowdelta.engine.assertion_log import AssertionLog
from rowdelta.engine.assertion_types import DeltaAssertionResult
from rowdelta.engine.mismatch_report import build_report, render_failure
from rowdelta.engine.multiset_diff import count_rows, multiset_difference
from rowdelta.model.data_set import DataSet
from rowdelta.model.data_source import DataSource
from rowdelta.store.snapshot_store import SnapshotStore


class QueryExecutor(Protocol):
    """Fetches the current rows of a data source."""

    def fetch(self, source: DataSource) -> DataSet:
        """Return a fresh data set reflecting the store at call time."""
        ...


class DeltaAsserter:
    """Runs delta assertions for one session's snapshot store."""

    def __init__(
        self,
        executor: QueryExecutor,
        snapshots: SnapshotStore,
        log: AssertionLog,
        config: DeltaConfig,
    ) -> None:
        self._executor = executor
        self._snapshots = snapshots
        self._log = log
        self._config = config

    def assert_delta(
        self,
        source: DataSource,
        expected_old: DataSet,
        expected_new: DataSet,
        message: str | None = None,
    ) -> DeltaAssertionResult:
        """Assert the exact change of a source since its snapshot.

        Args:
            source: Data source to check.
            expected_old: Rows expected to have been removed.
            expected_new: Rows expected to have been added.
            message: Optional description included in failures.

        Returns:
            Passed assertion result.

        Raises:
            DeltaUsageError: If no snapshot exists or expectations use another source.
            DeltaExecutionError: If fetching fresh data fails.
            DeltaAssertionError: If the observed delta differs.
        """
        _require_source(source, expected_old, "expected old data")
        _require_source(source, expected_new, "expected new data")
        snapshot = self._snapshots.require(source)
        fresh = self._executor.fetch(source)
        old_rows, new_rows = multiset_difference(snapshot, fresh)
        result = DeltaAssertionResult(
            source=source,
            expected_old=expected_old,
            expected_new=expected_new,
            actual_old=DataSet.from_rows(source, old_rows).set_read_only(),
            actual_new=DataSet.from_rows(source, new_rows).set_read_only(),
            old_report=build_report(OLD_DATA_LABEL, expected_old, old_rows),
            new_report=build_report(NEW_DATA_LABEL, expected_new, new_rows),
            message=message,
        )
        self._log.record(result)
        if not result.passed:
            if self._config.stale_snapshot_policy == "discard":
                self._snapshots.discard(source)
            raise DeltaAssertionError(render_failure(result), result)
        return result

    def assert_inserted(self, data: DataSet, message: str | None = None) -> DeltaAssertionResult:
        """Assert that exactly the given rows were added."""
        return self.assert_delta(data.source, DataSet(data.source), data, message)

    def assert_deleted(self, data: DataSet, message: str | None = None) -> DeltaAssertionResult:
        """Assert that exactly the given rows were removed."""
        return self.assert_delta(data.source, data, DataSet(data.source), message)

    def assert_unchanged(
        self, source: DataSource, message: str | None = None
    ) -> DeltaAssertionResult:
        """Assert that a source has not changed since its snapshot."""
        return self.assert_delta(source, DataSet(source), DataSet(source), message)

    def has_changed(self, source: DataSource) -> bool:
        """Check whether a source differs from its snapshot.

        Args:
            source: Data source to check.

        Returns:
            True when fresh rows differ from the snapshot as a multiset.

        Raises:
            DeltaUsageError: If no snapshot exists for the source.
        """
        snapshot = self._snapshots.require(source)
        fresh = self._executor.fetch(source)
        return count_rows(snapshot) != count_rows(fresh)


def _require_source(source: DataSource, data: DataSet, role: str) -> None:
    if data.source is not source:
        raise DeltaUsageError(
            f"Data source mismatch for {role}: expected {source.describe()}, "
            f"got {data.source.describe()}."
        )
