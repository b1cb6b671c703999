"""
Core components for the signaling relay.

This package holds the transport-independent state and logic: the
connection registry, the call session table, the message router and the
lifecycle manager that ties them together.
"""

from .types import SignalMessage, Delivery
from .connection_registry import ConnectionRegistry, Endpoint
from .session_table import CallSessionTable, CallSession, CallState, session_key
from .message_router import MessageRouter
from .lifecycle import LifecycleManager

__all__ = [
    "SignalMessage",
    "Delivery",
    "ConnectionRegistry",
    "Endpoint",
    "CallSessionTable",
    "CallSession",
    "CallState",
    "session_key",
    "MessageRouter",
    "LifecycleManager",
]
