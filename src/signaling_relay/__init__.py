"""
Signaling Relay - presence and call-session signaling for peer-to-peer calls.

This package lets two endpoints find each other by a stable identity and
exchange the handshake messages needed to set up a direct media session
(call request/accept/reject, SDP offer/answer, ICE candidates). It never
touches the media itself.

Architecture:
- Core: Connection registry, call session table, message router, lifecycle
- Networking: WebSocket server and JSON wire codec
- Config: Environment-based configuration
- Infrastructure: Logging and exceptions
"""

__version__ = "1.0.0"

# Core components
from .core import (
    CallSession,
    CallSessionTable,
    CallState,
    ConnectionRegistry,
    Delivery,
    Endpoint,
    LifecycleManager,
    MessageRouter,
    SignalMessage,
    session_key,
)

# Networking components
from .networking import SignalingServer, decode_message, encode_message

# Configuration
from .config import RelayConfig, RelayConfigManager

# Infrastructure
from .infrastructure.logging import setup_logging, get_logger
from .infrastructure.exceptions import (
    SignalingRelayError,
    ConfigurationError,
    MessageValidationError,
)

__all__ = [
    # Version info
    "__version__",
    # Core components
    "CallSession",
    "CallSessionTable",
    "CallState",
    "ConnectionRegistry",
    "Delivery",
    "Endpoint",
    "LifecycleManager",
    "MessageRouter",
    "SignalMessage",
    "session_key",
    # Networking components
    "SignalingServer",
    "decode_message",
    "encode_message",
    # Configuration
    "RelayConfig",
    "RelayConfigManager",
    # Infrastructure
    "setup_logging",
    "get_logger",
    "SignalingRelayError",
    "ConfigurationError",
    "MessageValidationError",
]
