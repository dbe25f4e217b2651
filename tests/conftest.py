"""Shared test fixtures for treeclassify.

Fixtures defined here are available to all tests in the suite without
needing an explicit import. Add project-wide fixtures here; keep
domain-specific fixtures close to the tests that use them.
"""
from __future__ import annotations

import pytest

from treeclassify import Classifier, MemoryObjectStore


@pytest.fixture()
def package_name() -> str:
    """Return the importable package name for assertions."""
    return "treeclassify"


@pytest.fixture()
def expected_version() -> str:
    """Return the current expected version string.

    Update this fixture when cutting a release so that the version
    test immediately catches stale ``__version__`` values.
    """
    return "0.1.0"


@pytest.fixture()
def store() -> MemoryObjectStore:
    """Return an empty in-memory object store."""
    return MemoryObjectStore()


@pytest.fixture()
def classifier(store: MemoryObjectStore) -> Classifier:
    """Return a classifier backed by the ``store`` fixture."""
    return Classifier(store=store)
