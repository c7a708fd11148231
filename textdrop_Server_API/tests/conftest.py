"""
Pytest fixtures shared by the code store and share endpoint tests.
"""

import pytest

from textdrop_Server_API.app.core.Code_Store import CodeStoreConfig, EphemeralCodeStore
from textdrop_Server_API.tests.test_utils import FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store_config():
    return CodeStoreConfig()


@pytest.fixture
def store(store_config, clock):
    """A store on the fake clock with the default config."""
    return EphemeralCodeStore(store_config, clock=clock)
