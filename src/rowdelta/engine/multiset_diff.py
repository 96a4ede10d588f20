"""Multiplicity-exact multiset operations over rows.

Rows are counted in hash buckets, so equality is only resolved between rows
that share a bucket. Every operation keeps duplicate counts exact.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable

from rowdelta.engine.assertion_types import RowDiscrepancy
from rowdelta.model.row import Row


def count_rows(rows: Iterable[Row]) -> Counter[Row]:
    """Count occurrences of each distinct row.

    Args:
        rows: Rows to count.

    Returns:
        Row multiset, keyed in order of first appearance.
    """
    return Counter(rows)


def multiset_difference(
    baseline: Iterable[Row],
    observed: Iterable[Row],
) -> tuple[list[Row], list[Row]]:
    """Compute the delta between two observations of the same source.

    A row present ``k`` times in the baseline and ``k'`` times in the
    observation yields ``max(k - k', 0)`` old copies and ``max(k' - k, 0)``
    new copies.

    Args:
        baseline: Rows of the earlier observation.
        observed: Rows of the later observation.

    Returns:
        Pair of old rows (gone) and new rows (appeared).
    """
    baseline_counts = count_rows(baseline)
    observed_counts = count_rows(observed)
    old_rows = list((baseline_counts - observed_counts).elements())
    new_rows = list((observed_counts - baseline_counts).elements())
    return old_rows, new_rows


def compare_row_counts(
    expected: Counter[Row],
    actual: Counter[Row],
) -> tuple[RowDiscrepancy, ...]:
    """List every distinct row whose multiplicity differs.

    Args:
        expected: Expected row multiset.
        actual: Actual row multiset.

    Returns:
        Discrepancies in expected-first order; empty when the multisets match.
    """
    discrepancies: list[RowDiscrepancy] = []
    for row, expected_count in expected.items():
        actual_count = actual.get(row, 0)
        if actual_count != expected_count:
            discrepancies.append(RowDiscrepancy(row, expected_count, actual_count))
    for row, actual_count in actual.items():
        if row not in expected:
            discrepancies.append(RowDiscrepancy(row, 0, actual_count))
    return tuple(discrepancies)
