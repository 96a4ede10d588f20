"""Data source variants.

A data source is either a physical table or an arbitrary SQL query with
optional bound arguments. Both expose one capability to collaborators:
the statement text plus its arguments.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Mapping, Sequence

from rowdelta.core.constants import QUERY_SOURCE_KIND, TABLE_SOURCE_KIND
from rowdelta.core.errors import DeltaUsageError

SourceKind = Literal["table", "query"]


@dataclass(frozen=True, eq=False)
class DataSource:
    """Identity-compared producer of rows.

    Attributes:
        kind: Variant tag, ``"table"`` or ``"query"``.
        text: Table name for tables, SQL text for queries.
        columns: Ordered column names.
        arguments: Named arguments bound to the query text.
    """

    kind: SourceKind
    text: str
    columns: tuple[str, ...]
    arguments: Mapping[str, object] = field(default_factory=dict)

    @property
    def column_count(self) -> int:
        """Number of columns in every row produced by this source."""
        return len(self.columns)

    @property
    def is_table(self) -> bool:
        """Whether this source is a physical table."""
        return self.kind == TABLE_SOURCE_KIND

    def statement(self) -> tuple[str, Mapping[str, object]]:
        """Return SQL text and bound arguments that produce this source's rows.

        Table text names identifiers unquoted. Database reads of tables build
        a dialect-quoted select instead.
        """
        if self.is_table:
            return f"SELECT {', '.join(self.columns)} FROM {self.text}", {}
        return self.text, self.arguments

    def describe(self) -> str:
        """Short label for log fields and failure messages."""
        if self.is_table:
            return f"table {self.text}"
        return f"query '{self.text}'"

    def __repr__(self) -> str:
        return f"DataSource({self.describe()}, columns={list(self.columns)})"


def table(name: str, columns: Sequence[str]) -> DataSource:
    """Create a table data source.

    Args:
        name: Table name.
        columns: Columns to read and write, in row order.

    Returns:
        New table data source.

    Raises:
        DeltaUsageError: If name or columns are empty.
    """
    if not name:
        raise DeltaUsageError("Table name must not be empty.")
    return DataSource(kind=TABLE_SOURCE_KIND, text=name, columns=_validate_columns(columns))


def query(
    sql: str,
    columns: Sequence[str],
    arguments: Mapping[str, object] | None = None,
) -> DataSource:
    """Create a query data source.

    Args:
        sql: Query text, using ``:name`` placeholders for arguments.
        columns: Result column names, in row order.
        arguments: Optional named arguments for the placeholders.

    Returns:
        New query data source.

    Raises:
        DeltaUsageError: If sql or columns are empty.
    """
    if not sql.strip():
        raise DeltaUsageError("Query text must not be empty.")
    return DataSource(
        kind=QUERY_SOURCE_KIND,
        text=sql,
        columns=_validate_columns(columns),
        arguments=dict(arguments or {}),
    )


def _validate_columns(columns: Sequence[str]) -> tuple[str, ...]:
    if isinstance(columns, str):
        raise DeltaUsageError(
            f"Columns must be a sequence of names, not the string '{columns}'."
        )
    normalized = tuple(columns)
    if not normalized:
        raise DeltaUsageError("A data source needs at least one column.")
    return normalized
