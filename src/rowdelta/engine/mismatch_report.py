"""Mismatch diagnostics for row multisets.

This module builds and renders the row-level difference between an
expected and an actual multiset of rows, and formats assertion failures.
"""

from __future__ import annotations

from typing import Iterable

from rowdelta.engine.assertion_types import (
    DataSetAssertionResult,
    DeltaAssertionResult,
    MismatchReport,
    RowDiscrepancy,
)
from rowdelta.engine.multiset_diff import compare_row_counts, count_rows
from rowdelta.model.data_set import DataSet
from rowdelta.model.row import Row


def build_report(label: str, expected: Iterable[Row], actual: Iterable[Row]) -> MismatchReport:
    """Compare two row multisets and capture their differences.

    Args:
        label: What is being compared.
        expected: Expected rows.
        actual: Actual rows.

    Returns:
        Report, empty when the multisets are equal.
    """
    discrepancies = compare_row_counts(count_rows(expected), count_rows(actual))
    return MismatchReport(label=label, discrepancies=discrepancies)


def render_discrepancy(item: RowDiscrepancy) -> str:
    """Render one diagnostic line."""
    return f"{item.row!r}: expected {item.expected_count}, found {item.actual_count} [{item.kind}]"


def render_report(report: MismatchReport) -> str:
    """Render a report into stable multi-line text."""
    if report.matches:
        return f"{report.label}: ok"
    lines = [f"{report.label}: {len(report.discrepancies)} mismatched row value(s)"]
    lines.extend(f"  {render_discrepancy(item)}" for item in report.discrepancies)
    return "\n".join(lines)


def render_failure(result: DeltaAssertionResult | DataSetAssertionResult) -> str:
    """Render the assertion error message for a failed result."""
    lines = [result.message] if result.message else []
    if isinstance(result, DeltaAssertionResult):
        lines.append(f"Delta assertion failed for {result.source.describe()}.")
    else:
        lines.append("Data set assertion failed.")
    lines.extend(render_report(report) for report in result.reports)
    return "\n".join(lines)


def render_data_set(data: DataSet) -> list[str]:
    """Render data set rows as strings for log fields."""
    return [repr(row) for row in data]
