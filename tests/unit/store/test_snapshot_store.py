"""Unit tests for the per-session snapshot store."""

from __future__ import annotations

import pytest

from rowdelta.core.errors import DeltaUsageError
from rowdelta.model.data_set import DataSet
from rowdelta.model.data_source import table
from rowdelta.store.snapshot_store import SnapshotStore

USERS = table("users", ["id"])
ORDERS = table("orders", ["id"])


def test_record_freezes_and_registers_data() -> None:
    """Recorded snapshots become read-only and retrievable."""
    store = SnapshotStore()
    data = DataSet(USERS).row(1)

    store.record(data)

    assert data.is_read_only and store.require(USERS) is data and USERS in store


def test_record_replaces_previous_snapshot() -> None:
    """At most one snapshot is held per source."""
    store = SnapshotStore()
    store.record(DataSet(USERS).row(1))
    latest = store.record(DataSet(USERS).row(2))

    assert store.get(USERS) is latest and len(store) == 1


def test_require_raises_for_missing_snapshot() -> None:
    """Requiring an unrecorded snapshot is a usage error."""
    with pytest.raises(DeltaUsageError):
        SnapshotStore().require(USERS)


def test_sources_are_tracked_independently() -> None:
    """Discarding one source leaves others untouched."""
    store = SnapshotStore()
    store.record(DataSet(USERS).row(1))
    store.record(DataSet(ORDERS).row(1))

    removed = store.discard(USERS)

    assert removed and store.get(USERS) is None and ORDERS in store and not store.discard(USERS)


def test_stores_do_not_share_snapshots() -> None:
    """Independent stores never see each other's baselines."""
    first_store = SnapshotStore()
    second_store = SnapshotStore()
    first_store.record(DataSet(USERS))

    assert USERS in first_store and USERS not in second_store


def test_clear_forgets_everything() -> None:
    """clear empties the store."""
    store = SnapshotStore()
    store.record(DataSet(USERS))
    store.record(DataSet(ORDERS))

    store.clear()

    assert len(store) == 0
