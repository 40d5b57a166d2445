"""
Shared fixtures for unit tests.
"""

import pytest

from binance_rest.exchange.models import ApiAuth

from tests.helpers import FROZEN_TIME_MS, RecordingTransport


@pytest.fixture
def transport():
    """Create a recording transport returning an empty 200 response."""
    return RecordingTransport()


@pytest.fixture
def frozen_clock():
    """Millisecond clock pinned to a fixed instant."""
    return lambda: FROZEN_TIME_MS


@pytest.fixture
def auth():
    """Test API keys."""
    return ApiAuth(public_key="pk1", private_key="sk1")
