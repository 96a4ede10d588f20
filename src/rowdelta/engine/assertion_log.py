"""Assertion logging.

Passed and failed assertions are written as structured events. Logging is
switched by configuration and never affects assertion outcomes.
"""

from __future__ import annotations

from rowdelta.core.config import DeltaConfig
from rowdelta.core.logging_config import get_logger
from rowdelta.engine.assertion_types import (
    DataSetAssertionResult,
    DeltaAssertionResult,
    MismatchReport,
)
from rowdelta.engine.mismatch_report import render_data_set, render_discrepancy

_LOGGER = get_logger(__name__)


class AssertionLog:
    """Writes assertion records according to logging switches."""

    def __init__(self, config: DeltaConfig) -> None:
        self._config = config

    def should_log(self, passed: bool) -> bool:
        """Whether an assertion with the given outcome is logged."""
        if self._config.log_assertions:
            return True
        return not passed and self._config.log_assertion_errors

    def record(self, result: DeltaAssertionResult | DataSetAssertionResult) -> None:
        """Log one assertion result if enabled.

        Args:
            result: Delta or data set assertion result.
        """
        if not self.should_log(result.passed):
            return
        event = "assertion_passed" if result.passed else "assertion_failed"
        if isinstance(result, DeltaAssertionResult):
            _LOGGER.info(
                event,
                assertion="delta",
                source=result.source.describe(),
                message=result.message,
                expected_old=render_data_set(result.expected_old),
                expected_new=render_data_set(result.expected_new),
                actual_old=render_data_set(result.actual_old),
                actual_new=render_data_set(result.actual_new),
                diff=_diff_fields(result.reports),
            )
            return
        _LOGGER.info(
            event,
            assertion="data_set",
            source=result.actual.source.describe(),
            message=result.message,
            expected=render_data_set(result.expected),
            actual=render_data_set(result.actual),
            diff=_diff_fields(result.reports),
        )


def _diff_fields(reports: tuple[MismatchReport, ...]) -> dict[str, list[str]]:
    return {
        report.label: [render_discrepancy(item) for item in report.discrepancies]
        for report in reports
    }
