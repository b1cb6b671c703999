"""
Architecture tests for the signaling relay.

These tests verify that the package layout works correctly and all
components can be imported and wired together as expected.
"""

import pytest


class TestArchitectureImports:
    """Test that all modules can be imported correctly."""

    def test_main_package_import(self):
        """Test that the main package can be imported."""
        import signaling_relay

        assert hasattr(signaling_relay, "__version__")
        assert not hasattr(signaling_relay, "__author__")

    def test_core_imports(self):
        """Test core module imports."""
        from signaling_relay.core import (
            CallSessionTable,
            ConnectionRegistry,
            LifecycleManager,
            MessageRouter,
        )
        from signaling_relay.core.connection_registry import ConnectionRegistry as RegistryClass
        from signaling_relay.core.session_table import CallSessionTable as TableClass
        from signaling_relay.core.message_router import MessageRouter as RouterClass
        from signaling_relay.core.lifecycle import LifecycleManager as LifecycleClass

        assert ConnectionRegistry == RegistryClass
        assert CallSessionTable == TableClass
        assert MessageRouter == RouterClass
        assert LifecycleManager == LifecycleClass

    def test_networking_imports(self):
        """Test networking module imports."""
        from signaling_relay.networking import SignalingServer
        from signaling_relay.networking.signaling_server import SignalingServer as ServerClass

        assert SignalingServer == ServerClass

    def test_config_imports(self):
        """Test configuration module imports."""
        from signaling_relay.config import RelayConfig, RelayConfigManager
        from signaling_relay.config.settings import RelayConfig as ConfigClass

        assert RelayConfig == ConfigClass
        assert RelayConfigManager is not None

    def test_infrastructure_imports(self):
        """Test infrastructure module imports."""
        from signaling_relay.infrastructure import setup_logging, get_logger, SignalingRelayError
        from signaling_relay.infrastructure.logging import get_logger as get_logger_func
        from signaling_relay.infrastructure.exceptions import (
            ConfigurationError,
            MessageValidationError,
            SignalingRelayError as BaseErrorClass,
        )

        assert get_logger == get_logger_func
        assert SignalingRelayError == BaseErrorClass
        assert issubclass(ConfigurationError, SignalingRelayError)
        assert issubclass(MessageValidationError, SignalingRelayError)
        assert callable(setup_logging)


class TestInstanceIsolation:
    """Test that relay instances never share state."""

    @pytest.mark.unit
    def test_servers_have_independent_state(self):
        from signaling_relay.networking import SignalingServer

        first = SignalingServer(port=0)
        second = SignalingServer(port=0)
        first.lifecycle.connect("conn-1")
        first.lifecycle.register("conn-1", "alice")

        assert second.lifecycle.registry.list_identities() == set()
        assert first.lifecycle.registry is not second.lifecycle.registry
        assert first.lifecycle.sessions is not second.lifecycle.sessions
