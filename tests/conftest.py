"""Shared fixtures for the test-suite."""

import pytest

from generation.context import BuildContext

from fakes import MemorySourceRepo


@pytest.fixture
def memory_repo():
    return MemorySourceRepo()


@pytest.fixture
def make_context(memory_repo):
    """Factory building a BuildContext with sensible test defaults."""

    def _make(**overrides):
        values = {
            "source_repo": memory_repo,
            "source_dir": "/src",
            "destination_dir": "/out",
            "temp_dir": "/tmp/buildsmith-test",
            "operation_id": "op-123",
        }
        values.update(overrides)
        return BuildContext(**values)

    return _make
