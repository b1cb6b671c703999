"""
Pytest configuration and shared fixtures for the signaling relay test suite.

This module provides common fixtures and configuration for all tests.
"""

import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock

from signaling_relay.config.settings import RelayConfig
from signaling_relay.core import CallSessionTable, ConnectionRegistry, LifecycleManager


class FakeConnection:
    """Stand-in for a websockets ServerConnection that replays queued frames."""

    def __init__(self, frames=(), remote_address=("127.0.0.1", 50000)):
        self.frames = list(frames)
        self.remote_address = remote_address
        self.send = AsyncMock()

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        # Yield to the loop around each frame so outbound writers can run
        for frame in self.frames:
            await asyncio.sleep(0)
            yield frame
        await asyncio.sleep(0)


@pytest.fixture
def registry():
    """Create an empty connection registry."""
    return ConnectionRegistry()


@pytest.fixture
def sessions():
    """Create an empty call session table."""
    return CallSessionTable()


@pytest.fixture
def lifecycle(registry, sessions):
    """Create a lifecycle manager over the shared registry and session table."""
    return LifecycleManager(registry, sessions)


@pytest.fixture
def mock_config():
    """Create a configuration for testing."""
    return RelayConfig(
        host="127.0.0.1",
        port=0,
        log_level="DEBUG",
        ping_interval=0,
    )


@pytest.fixture
def mock_websocket():
    """Create a mock WebSocket connection for testing."""
    websocket = MagicMock()
    websocket.remote_address = ("127.0.0.1", 12345)
    websocket.send = AsyncMock()
    websocket.close = AsyncMock()
    return websocket


@pytest.fixture
def make_connection():
    """Factory for FakeConnection objects with queued inbound frames."""

    def _make(*frames, port=50000):
        return FakeConnection(frames, remote_address=("127.0.0.1", port))

    return _make


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
