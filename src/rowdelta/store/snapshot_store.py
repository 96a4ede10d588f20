"""Per-session snapshot store.

This module records the most recent data set observed or written for each
data source. Delta assertions use it as their baseline. A store belongs to
one database session and is not synchronized; callers serialize access
per data source.
"""

from __future__ import annotations

from rowdelta.core.errors import DeltaUsageError
from rowdelta.model.data_set import DataSet
from rowdelta.model.data_source import DataSource


class SnapshotStore:
    """Registry holding at most one snapshot per data source."""

    def __init__(self) -> None:
        self._snapshots: dict[DataSource, DataSet] = {}

    def record(self, data: DataSet) -> DataSet:
        """Record a data set as the snapshot of its source.

        Any earlier snapshot for the same source is replaced wholesale.
        The data set is frozen so the baseline cannot drift.

        Args:
            data: Data set to record.

        Returns:
            The recorded, read-only data set.
        """
        data.set_read_only()
        self._snapshots[data.source] = data
        return data

    def get(self, source: DataSource) -> DataSet | None:
        """Return the snapshot for a source, or None."""
        return self._snapshots.get(source)

    def require(self, source: DataSource) -> DataSet:
        """Return the snapshot for a source.

        Args:
            source: Data source to look up.

        Returns:
            Recorded snapshot.

        Raises:
            DeltaUsageError: If no snapshot is recorded for the source.
        """
        snapshot = self._snapshots.get(source)
        if snapshot is None:
            raise DeltaUsageError(
                f"No snapshot recorded for {source.describe()}. "
                "Call populate or take_snapshot before a delta assertion."
            )
        return snapshot

    def discard(self, source: DataSource) -> bool:
        """Forget the snapshot of a source.

        Returns:
            True if a snapshot was removed.
        """
        return self._snapshots.pop(source, None) is not None

    def clear(self) -> None:
        """Forget every snapshot."""
        self._snapshots.clear()

    def __contains__(self, source: object) -> bool:
        return source in self._snapshots

    def __len__(self) -> int:
        return len(self._snapshots)
