"""Database session handle.

This module exposes the high-level API used by test suites: data source
factories, setup operations, snapshots, and delta/state assertions.
Each handle owns its own snapshot store, so independent sessions never
share baselines. A handle is not thread-safe.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping, Sequence

from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.engine.base import NestedTransaction
from sqlalchemy.exc import SQLAlchemyError

from rowdelta.core.config import DeltaConfig
from rowdelta.core.errors import DeltaExecutionError, DeltaUsageError
from rowdelta.core.logging_config import get_logger
from rowdelta.db.sql_executor import SqlExecutor
from rowdelta.engine.assertion_log import AssertionLog
from rowdelta.engine.assertion_types import DataSetAssertionResult, DeltaAssertionResult
from rowdelta.engine.delta_assertions import DeltaAsserter
from rowdelta.engine.mismatch_report import render_data_set
from rowdelta.engine.multiset_diff import count_rows
from rowdelta.engine.state_assertions import assert_empty, assert_equals, assert_state
from rowdelta.model import data_source as data_sources
from rowdelta.model.data_set import DataSet
from rowdelta.model.data_source import DataSource
from rowdelta.store.snapshot_store import SnapshotStore

_LOGGER = get_logger(__name__)


class Database:
    """Primary entry point binding a connection to a snapshot store."""

    def __init__(
        self,
        connection: Connection,
        config: DeltaConfig | None = None,
        engine: Engine | None = None,
    ) -> None:
        """Create a session handle.

        Args:
            connection: Open SQLAlchemy connection.
            config: Optional runtime configuration, read from env when omitted.
            engine: Engine to dispose on teardown when the handle owns it.
        """
        self._connection = connection
        self._engine = engine
        self._snapshots = SnapshotStore()
        self._savepoint: NestedTransaction | None = None
        self._apply_config(config or DeltaConfig.from_env())

    @classmethod
    def from_url(cls, url: str, config: DeltaConfig | None = None) -> "Database":
        """Create a handle on a new connection to a database URL.

        Raises:
            DeltaExecutionError: If the connection cannot be opened.
        """
        try:
            engine = create_engine(url)
            connection = engine.connect()
        except SQLAlchemyError as error:
            raise DeltaExecutionError(f"Failed to connect to {url}: {error}") from error
        return cls(connection, config, engine=engine)

    @property
    def config(self) -> DeltaConfig:
        return self._config

    @property
    def connection(self) -> Connection:
        return self._connection

    @property
    def snapshots(self) -> SnapshotStore:
        return self._snapshots

    def configure(self, **changes: Any) -> DeltaConfig:
        """Replace configuration fields for this handle.

        Returns:
            The updated configuration.

        Raises:
            DeltaConfigError: If the new values are invalid.
        """
        self._apply_config(replace(self._config, **changes))
        return self._config

    def enable_full_logging(self) -> DeltaConfig:
        """Turn on every logging switch for this handle."""
        self._apply_config(self._config.with_full_logging())
        return self._config

    def table(self, name: str, columns: Sequence[str]) -> DataSource:
        """Create a table data source."""
        return data_sources.table(name, columns)

    def query(
        self,
        sql: str,
        arguments: Mapping[str, object] | None = None,
        columns: Sequence[str] | None = None,
    ) -> DataSource:
        """Create a query data source.

        When columns are omitted the query is run once to read its result
        column names.

        Raises:
            DeltaExecutionError: If column discovery fails.
        """
        bound = dict(arguments or {})
        if columns is None:
            columns = self._executor.describe_columns(sql, bound)
        return data_sources.query(sql, columns, bound)

    def data_set(self, source: DataSource) -> DataSet:
        """Create an empty data set for a source."""
        return DataSet(source)

    def fetch(self, source: DataSource) -> DataSet:
        """Read the current rows of a source without touching its snapshot."""
        data = self._executor.fetch(source)
        if self._config.log_queries:
            _LOGGER.info(
                "query_executed",
                source=source.describe(),
                row_count=len(data),
                rows=render_data_set(data),
            )
        return data

    def take_snapshot(self, source: DataSource) -> DataSet:
        """Record the current rows of a source as its snapshot.

        Returns:
            The recorded, read-only snapshot.
        """
        snapshot = self._snapshots.record(self._executor.fetch(source))
        if self._config.log_snapshots:
            _LOGGER.info(
                "snapshot_taken",
                source=source.describe(),
                row_count=len(snapshot),
                rows=render_data_set(snapshot),
            )
        return snapshot

    def populate(self, data: DataSet) -> DataSet:
        """Make a table hold exactly the given rows and record them as snapshot.

        The data set is recorded without re-reading the table and becomes
        read-only.

        Raises:
            DeltaUsageError: If the data source is not a table.
            DeltaExecutionError: If the table cannot be written.
        """
        self._executor.populate(data)
        snapshot = self._snapshots.record(data)
        self._log_setup("table_populated", data.source, row_count=len(data))
        return snapshot

    def populate_if_changed(self, data: DataSet) -> bool:
        """Populate a table unless it already holds the data as its snapshot.

        Returns:
            True if the table was populated.
        """
        snapshot = self._snapshots.get(data.source)
        if (
            snapshot is not None
            and count_rows(snapshot) == count_rows(data)
            and not self._asserter.has_changed(data.source)
        ):
            self._log_setup("populate_skipped", data.source, row_count=len(data))
            return False
        self.populate(data)
        return True

    def insert(self, data: DataSet) -> int:
        """Append rows to a table. The snapshot is not updated.

        Returns:
            Number of inserted rows.
        """
        inserted = self._executor.insert(data)
        self._log_setup("rows_inserted", data.source, row_count=inserted)
        return inserted

    def delete_all(self, source: DataSource) -> int:
        """Delete every row of a table. The snapshot is not updated.

        Returns:
            Number of deleted rows reported by the driver.
        """
        deleted = self._executor.delete_all(source)
        self._log_setup("rows_deleted", source, row_count=deleted)
        return deleted

    def assert_delta(
        self,
        source: DataSource,
        expected_old: DataSet,
        expected_new: DataSet,
        message: str | None = None,
    ) -> DeltaAssertionResult:
        """Assert the exact change of a source since its snapshot."""
        return self._asserter.assert_delta(source, expected_old, expected_new, message)

    def assert_inserted(self, data: DataSet, message: str | None = None) -> DeltaAssertionResult:
        """Assert that exactly the given rows were added since the snapshot."""
        return self._asserter.assert_inserted(data, message)

    def assert_deleted(self, data: DataSet, message: str | None = None) -> DeltaAssertionResult:
        """Assert that exactly the given rows were removed since the snapshot."""
        return self._asserter.assert_deleted(data, message)

    def assert_unchanged(
        self, source: DataSource, message: str | None = None
    ) -> DeltaAssertionResult:
        """Assert that a source has not changed since its snapshot."""
        return self._asserter.assert_unchanged(source, message)

    def has_changed(self, *sources: DataSource) -> bool:
        """Check whether any source differs from its snapshot."""
        return any(self._asserter.has_changed(source) for source in sources)

    def assert_state(
        self,
        source: DataSource,
        expected: DataSet,
        message: str | None = None,
    ) -> DataSetAssertionResult:
        """Assert that a source currently holds exactly the expected rows."""
        return assert_state(self._executor, self._log, source, expected, message)

    def assert_empty(self, source: DataSource, message: str | None = None) -> DataSetAssertionResult:
        """Assert that a source currently holds no rows."""
        return assert_empty(self._executor, self._log, source, message)

    def assert_equals(
        self,
        expected: DataSet,
        actual: DataSet,
        message: str | None = None,
    ) -> DataSetAssertionResult:
        """Assert multiset equality of two data sets, ignoring their sources."""
        return assert_equals(self._log, expected, actual, message)

    def save(self) -> None:
        """Set a savepoint, releasing any previous one.

        Raises:
            DeltaExecutionError: If the savepoint cannot be set.
        """
        self._release_savepoint()
        try:
            self._savepoint = self._connection.begin_nested()
        except SQLAlchemyError as error:
            raise DeltaExecutionError(f"Failed to set savepoint: {error}") from error
        self._log_setup("savepoint_set", None)

    def restore(self) -> None:
        """Roll back to the current savepoint and clear it.

        Raises:
            DeltaUsageError: If no savepoint is set.
            DeltaExecutionError: If the rollback fails.
        """
        if self._savepoint is None:
            raise DeltaUsageError("Savepoint is not set. Call save before restore.")
        savepoint, self._savepoint = self._savepoint, None
        try:
            savepoint.rollback()
        except SQLAlchemyError as error:
            raise DeltaExecutionError(f"Failed to restore savepoint: {error}") from error
        self._log_setup("savepoint_restored", None)

    def commit(self) -> None:
        """Release any savepoint and commit the current transaction.

        Raises:
            DeltaExecutionError: If the commit fails.
        """
        self._release_savepoint()
        try:
            self._connection.commit()
        except SQLAlchemyError as error:
            raise DeltaExecutionError(f"Failed to commit: {error}") from error
        self._log_setup("transaction_committed", None)

    def teardown(self, close_connection: bool = False) -> None:
        """Forget snapshots and the savepoint, optionally closing the connection.

        Args:
            close_connection: Close the connection (and dispose an owned engine).
        """
        self._log_setup("teardown", None, close_connection=close_connection)
        self._snapshots.clear()
        self._release_savepoint()
        if close_connection:
            self._connection.close()
            if self._engine is not None:
                self._engine.dispose()

    def _apply_config(self, config: DeltaConfig) -> None:
        self._config = config
        self._executor = SqlExecutor(self._connection, config)
        self._log = AssertionLog(config)
        self._asserter = DeltaAsserter(self._executor, self._snapshots, self._log, config)

    def _release_savepoint(self) -> None:
        if self._savepoint is None:
            return
        savepoint, self._savepoint = self._savepoint, None
        if savepoint.is_active:
            try:
                savepoint.commit()
            except SQLAlchemyError as error:
                raise DeltaExecutionError(f"Failed to release savepoint: {error}") from error

    def _log_setup(self, event: str, source: DataSource | None, **fields: object) -> None:
        if not self._config.log_setup:
            return
        _LOGGER.info(
            event,
            source=source.describe() if source is not None else None,
            **fields,
        )
