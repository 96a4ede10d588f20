"""rowdelta exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Usage errors, data mismatches, and database failures are distinct types
so test suites can treat authoring bugs differently from real failures.
"""

from __future__ import annotations

from typing import Any


class DeltaError(Exception):
    """Base exception for all rowdelta failures."""


class DeltaConfigError(DeltaError):
    """Raised for invalid runtime configuration."""


class DeltaDependencyError(DeltaError):
    """Raised when an optional runtime dependency is missing."""


class DeltaUsageError(DeltaError):
    """Raised when the API is misused by the caller."""


class DeltaExecutionError(DeltaError):
    """Raised when a database collaborator fails."""


class DeltaAssertionError(DeltaError, AssertionError):
    """Raised when observed data does not match the expectation.

    Attributes:
        result: Structured assertion result with the full diff.
    """

    def __init__(self, message: str, result: Any) -> None:
        super().__init__(message)
        self.result = result
