"""Unit tests for data source variants."""

from __future__ import annotations

import pytest

from rowdelta.core.errors import DeltaUsageError
from rowdelta.model.data_source import query, table


def test_table_statement_selects_declared_columns() -> None:
    """A table source reads its columns in declared order."""
    source = table("users", ["id", "name"])

    assert source.statement() == ("SELECT id, name FROM users", {})


def test_query_statement_carries_arguments() -> None:
    """A query source exposes its text and bound arguments."""
    source = query("SELECT id FROM users WHERE id > :low", ["id"], {"low": 3})

    assert source.statement() == ("SELECT id FROM users WHERE id > :low", {"low": 3})


def test_sources_compare_by_identity() -> None:
    """Two equal-looking sources are still distinct sources."""
    first_source = table("users", ["id"])
    second_source = table("users", ["id"])

    assert first_source != second_source and first_source == first_source


def test_column_count_and_kind() -> None:
    """Sources report their arity and variant."""
    users = table("users", ["id", "name", "email"])
    ids = query("SELECT id FROM users", ["id"])

    assert users.column_count == 3 and users.is_table and not ids.is_table


@pytest.mark.parametrize("columns", [[], "id"])
def test_invalid_columns_are_rejected(columns: object) -> None:
    """Empty column lists and bare strings are usage errors."""
    with pytest.raises(DeltaUsageError):
        table("users", columns)  # type: ignore[arg-type]


def test_empty_query_text_is_rejected() -> None:
    """A query source needs SQL text."""
    with pytest.raises(DeltaUsageError):
        query("   ", ["id"])
