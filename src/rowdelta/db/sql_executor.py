"""Query execution and table population over a SQLAlchemy connection.

Every database failure is logged (when enabled) and re-raised as a
DeltaExecutionError. Nothing here retries.
"""

from __future__ import annotations

from typing import Callable, Iterator, Mapping, TypeVar

from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from rowdelta.core.config import DeltaConfig
from rowdelta.core.errors import DeltaError, DeltaExecutionError
from rowdelta.core.logging_config import get_logger
from rowdelta.db.sql_statements import delete_statement, insert_statement, select_statement
from rowdelta.model.data_set import DataSet
from rowdelta.model.data_source import DataSource
from rowdelta.model.row import Row

_LOGGER = get_logger(__name__)
_T = TypeVar("_T")


class SqlExecutor:
    """Fetches and writes data set rows through one connection."""

    def __init__(self, connection: Connection, config: DeltaConfig) -> None:
        """Initialize executor.

        Args:
            connection: Open SQLAlchemy connection.
            config: Runtime configuration.
        """
        self._connection = connection
        self._config = config

    def fetch(self, source: DataSource) -> DataSet:
        """Read the current rows of a data source.

        Args:
            source: Data source to read.

        Returns:
            Fresh data set with one row per result row.

        Raises:
            DeltaExecutionError: If the query fails or returns the wrong column count.
        """
        statement, arguments = select_statement(source)

        def _run() -> list[Row]:
            result = self._connection.execute(statement, arguments)
            column_count = len(result.keys())
            if column_count != source.column_count:
                result.close()
                raise DeltaExecutionError(
                    f"Query for {source.describe()} returned {column_count} columns, "
                    f"expected {source.column_count}."
                )
            return [Row(record) for record in result]

        rows = self._access("fetch", source, _run)
        return DataSet.from_rows(source, rows)

    def describe_columns(self, sql: str, arguments: Mapping[str, object]) -> tuple[str, ...]:
        """Run a query once and return its result column names.

        Raises:
            DeltaExecutionError: If the query fails.
        """

        def _run() -> tuple[str, ...]:
            result = self._connection.execute(text(sql), dict(arguments))
            keys = tuple(str(key) for key in result.keys())
            result.close()
            return keys

        return self._access("describe_columns", None, _run)

    def populate(self, data: DataSet) -> None:
        """Replace the contents of a table with the given rows.

        Delete and insert run under one savepoint, so a failure leaves the
        table as it was.

        Args:
            data: Rows the table must hold afterwards.

        Raises:
            DeltaUsageError: If the data source is not a table.
            DeltaExecutionError: If delete or insert fails.
        """

        def _run() -> None:
            self.delete_all(data.source)
            self.insert(data)

        self._atomic("populate", data.source, _run)

    def insert(self, data: DataSet) -> int:
        """Append rows to a table in batches, all or none.

        Returns:
            Number of inserted rows.

        Raises:
            DeltaUsageError: If the data source is not a table.
            DeltaExecutionError: If an insert batch fails.
        """
        statement = insert_statement(data.source)
        columns = data.source.columns

        def _run() -> int:
            for batch in _batches(data.rows, self._config.batch_size):
                parameters = [dict(zip(columns, row.values)) for row in batch]
                self._access(
                    "insert",
                    data.source,
                    lambda: self._connection.execute(statement, parameters),
                )
            return len(data)

        return self._atomic("insert", data.source, _run)

    def delete_all(self, source: DataSource) -> int:
        """Delete every row of a table.

        Returns:
            Number of deleted rows reported by the driver.

        Raises:
            DeltaUsageError: If the data source is not a table.
            DeltaExecutionError: If the delete fails.
        """
        statement = delete_statement(source)
        result = self._access("delete", source, lambda: self._connection.execute(statement))
        return int(result.rowcount)

    def _atomic(
        self,
        operation: str,
        source: DataSource,
        action: Callable[[], _T],
    ) -> _T:
        savepoint = self._access(operation, source, self._connection.begin_nested)
        try:
            result = action()
        except DeltaError:
            if savepoint.is_active:
                self._access(operation, source, savepoint.rollback)
            raise
        self._access(operation, source, savepoint.commit)
        return result

    def _access(
        self,
        operation: str,
        source: DataSource | None,
        action: Callable[[], _T],
    ) -> _T:
        try:
            return action()
        except SQLAlchemyError as error:
            if self._config.log_database_exceptions:
                _LOGGER.error(
                    "database_error",
                    operation=operation,
                    source=source.describe() if source is not None else None,
                    error=str(error),
                )
            target = source.describe() if source is not None else "query"
            raise DeltaExecutionError(
                f"Database {operation} failed for {target}: {error}"
            ) from error


def _batches(rows: tuple[Row, ...], size: int) -> Iterator[tuple[Row, ...]]:
    for start in range(0, len(rows), size):
        yield rows[start : start + size]
