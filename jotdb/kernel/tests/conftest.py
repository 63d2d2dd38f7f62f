"""
JotDB kernel test configuration.

Kernel tests run against MemoryStorage with function-scoped fixtures.
PostgresStorage tests that need DATABASE_URL are skipped automatically when not set.
"""

import pytest

from jotdb.kernel.storage import MemoryStorage
from jotdb.kernel.store import JotStore


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    return JotStore(storage, name="test")
