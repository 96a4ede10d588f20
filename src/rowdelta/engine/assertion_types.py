"""Typed models for assertion results and mismatch diagnostics."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from rowdelta.model.data_set import DataSet
from rowdelta.model.data_source import DataSource
from rowdelta.model.row import Row

DiscrepancyKind = Literal["missing", "unexpected", "count"]


@dataclass(frozen=True)
class RowDiscrepancy:
    """One distinct row whose multiplicity differs.

    Attributes:
        row: Row value.
        expected_count: Occurrences in the expected multiset.
        actual_count: Occurrences in the actual multiset.
    """

    row: Row
    expected_count: int
    actual_count: int

    @property
    def kind(self) -> DiscrepancyKind:
        """Classify the discrepancy for display."""
        if self.actual_count == 0:
            return "missing"
        if self.expected_count == 0:
            return "unexpected"
        return "count"


@dataclass(frozen=True)
class MismatchReport:
    """Row-level difference for one compared pair of multisets.

    Attributes:
        label: What was compared, e.g. ``"old data"``.
        discrepancies: Distinct rows whose counts differ.
    """

    label: str
    discrepancies: tuple[RowDiscrepancy, ...]

    @property
    def matches(self) -> bool:
        """Whether the compared multisets are equal."""
        return not self.discrepancies

    @property
    def missing(self) -> tuple[RowDiscrepancy, ...]:
        """Discrepancies where the actual side has fewer copies."""
        return tuple(item for item in self.discrepancies if item.actual_count < item.expected_count)

    @property
    def unexpected(self) -> tuple[RowDiscrepancy, ...]:
        """Discrepancies where the actual side has more copies."""
        return tuple(item for item in self.discrepancies if item.actual_count > item.expected_count)


@dataclass(frozen=True)
class DeltaAssertionResult:
    """Outcome of one delta assertion."""

    source: DataSource
    expected_old: DataSet
    expected_new: DataSet
    actual_old: DataSet
    actual_new: DataSet
    old_report: MismatchReport
    new_report: MismatchReport
    message: str | None = None

    @property
    def passed(self) -> bool:
        """Whether both old and new data matched."""
        return self.old_report.matches and self.new_report.matches

    @property
    def reports(self) -> tuple[MismatchReport, ...]:
        return (self.old_report, self.new_report)


@dataclass(frozen=True)
class DataSetAssertionResult:
    """Outcome of one state or data set equality assertion."""

    expected: DataSet
    actual: DataSet
    report: MismatchReport
    message: str | None = None

    @property
    def passed(self) -> bool:
        """Whether expected and actual data matched."""
        return self.report.matches

    @property
    def reports(self) -> tuple[MismatchReport, ...]:
        return (self.report,)
