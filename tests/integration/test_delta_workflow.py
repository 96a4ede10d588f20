"""Integration tests for snapshot and delta workflows through the public SDK."""

from __future__ import annotations

from typing import Iterator

import pytest
from sqlalchemy.engine import Connection

import rowdelta
from rowdelta import DataSet, Database, DeltaAssertionError, DeltaConfig, DeltaUsageError


def _close_account(connection: Connection, account_id: int) -> None:
    """Operation under test: archive an account and record an audit entry."""
    connection.exec_driver_sql(
        "INSERT INTO archived_accounts SELECT id, owner, balance FROM accounts WHERE id = ?",
        (account_id,),
    )
    connection.exec_driver_sql("DELETE FROM accounts WHERE id = ?", (account_id,))
    connection.exec_driver_sql(
        "INSERT INTO audit_log (action, account_id) VALUES ('close', ?)", (account_id,)
    )


@pytest.fixture
def database() -> Iterator[Database]:
    """Bank schema in an in-memory SQLite database."""
    handle = Database.from_url("sqlite://", DeltaConfig(log_assertion_errors=False))
    for ddl in (
        "CREATE TABLE accounts (id INTEGER, owner TEXT, balance NUMERIC)",
        "CREATE TABLE archived_accounts (id INTEGER, owner TEXT, balance NUMERIC)",
        "CREATE TABLE audit_log (action TEXT, account_id INTEGER)",
    ):
        handle.connection.exec_driver_sql(ddl)
    yield handle
    handle.teardown(close_connection=True)


def test_close_account_changes_exactly_three_tables(database: Database) -> None:
    """Each table changes exactly as the operation promises."""
    accounts = database.table("accounts", ["id", "owner", "balance"])
    archived = database.table("archived_accounts", ["id", "owner", "balance"])
    audit = database.table("audit_log", ["action", "account_id"])
    initial = DataSet(accounts).row(1, "ana", 100).row(2, "bo", 50).row(3, "cy", 0)
    database.populate(initial)
    database.populate(DataSet(archived))
    database.populate(DataSet(audit))

    _close_account(database.connection, 3)

    database.assert_deleted(rowdelta.last(initial, 1), "account 3 removed")
    database.assert_inserted(DataSet(archived).row(3, "cy", 0.0))
    database.assert_inserted(DataSet(audit).row("close", 3))
    assert database.assert_state(accounts, rowdelta.first(initial, 2)).passed


def test_duplicate_rows_are_counted_exactly(database: Database) -> None:
    """Removing one of three duplicates is a delta of one row, not zero."""
    audit = database.table("audit_log", ["action", "account_id"])
    database.populate(DataSet(audit).row("open", 1).row("open", 1).row("open", 1))
    database.connection.exec_driver_sql(
        "DELETE FROM audit_log WHERE rowid = (SELECT MIN(rowid) FROM audit_log)"
    )

    with pytest.raises(DeltaAssertionError):
        database.assert_unchanged(audit)

    assert database.assert_deleted(DataSet(audit).row("open", 1)).passed


def test_new_window_requires_new_snapshot(database: Database) -> None:
    """Snapshots persist across passing assertions until replaced."""
    audit = database.table("audit_log", ["action", "account_id"])
    database.populate(DataSet(audit))
    database.connection.exec_driver_sql("INSERT INTO audit_log VALUES ('open', 7)")
    database.assert_inserted(DataSet(audit).row("open", 7))

    database.connection.exec_driver_sql("INSERT INTO audit_log VALUES ('open', 8)")
    cumulative = database.assert_inserted(DataSet(audit).row("open", 7).row("open", 8)).passed
    database.take_snapshot(audit)

    assert cumulative and database.assert_unchanged(audit).passed


def test_sessions_keep_independent_snapshots(database: Database) -> None:
    """A second handle on the same connection has no snapshots of its own."""
    audit = database.table("audit_log", ["action", "account_id"])
    database.populate(DataSet(audit))
    other = Database(database.connection, DeltaConfig(log_assertion_errors=False))

    with pytest.raises(DeltaUsageError):
        other.assert_unchanged(audit)

    assert database.assert_unchanged(audit).passed


def test_sdk_assert_equals_compares_values_only() -> None:
    """The module-level assert_equals needs no database."""
    expected_source = rowdelta.table("totals", ["owner", "amount"])
    actual_source = rowdelta.query("SELECT owner, amount FROM totals", ["owner", "amount"])
    expected = DataSet(expected_source).row("ana", 2).row("bo", 1)
    actual = DataSet(actual_source).row("bo", 1).row("ana", 2)
    config = DeltaConfig(log_assertion_errors=False)

    passed = rowdelta.assert_equals(expected, actual, config=config).passed
    with pytest.raises(DeltaAssertionError, match="expected 1, found 2"):
        rowdelta.assert_equals(
            DataSet(expected_source).row("bo", 1),
            DataSet(actual_source).row("bo", 1).row("bo", 1),
            config=config,
        )

    assert passed
