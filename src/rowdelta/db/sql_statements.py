"""SQLAlchemy statement builders for data sources."""

from __future__ import annotations

from typing import Any

from sqlalchemy import column, delete, insert, select, table, text
from sqlalchemy.sql.expression import Delete, Executable, Insert, TableClause

from rowdelta.core.errors import DeltaUsageError
from rowdelta.model.data_source import DataSource


def select_statement(source: DataSource) -> tuple[Executable, dict[str, Any]]:
    """Build the query that reads a source's rows, with its bound arguments.

    Table sources go through the dialect so identifiers are quoted the same
    way as for writes. Query sources run their SQL text as given.
    """
    if source.is_table:
        return select(*_table_clause(source).columns), {}
    sql, arguments = source.statement()
    return text(sql), dict(arguments)


def delete_statement(source: DataSource) -> Delete:
    """Build an unconditional delete for a table source."""
    return delete(_writable_table(source))


def insert_statement(source: DataSource) -> Insert:
    """Build an insert over every column of a table source."""
    return insert(_writable_table(source))


def _writable_table(source: DataSource) -> TableClause:
    if not source.is_table:
        raise DeltaUsageError(
            f"Cannot write to {source.describe()}: only table data sources can be modified."
        )
    return _table_clause(source)


def _table_clause(source: DataSource) -> TableClause:
    return table(source.text, *(column(name) for name in source.columns))
