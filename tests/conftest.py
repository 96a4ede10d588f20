"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine


def pytest_sessionstart() -> None:
    """Add project root and src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    for import_root in (project_root, project_root / "src"):
        if str(import_root) not in sys.path:
            sys.path.insert(0, str(import_root))


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    """In-memory SQLite engine disposed after each test."""
    engine = create_engine("sqlite://")
    yield engine
    engine.dispose()
