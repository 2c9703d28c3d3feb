"""
Shared pytest configuration.
"""

import pytest


@pytest.fixture
def anyio_backend():
    """ Run the async tests on asyncio only """
    return 'asyncio'
