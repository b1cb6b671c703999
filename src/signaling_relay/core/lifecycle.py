"""
Lifecycle manager for the signaling relay.

Owns the set of live connection handles and orchestrates registration,
presence broadcasts and disconnect cleanup on top of the registry and the
session table. Every operation is synchronous and returns the deliveries it
produced; the transport performs them. Running each call to completion on a
single event loop is what keeps the shared state consistent.
"""

import logging
from typing import Dict, Hashable, List, Optional

from .connection_registry import ConnectionRegistry
from .message_router import MessageRouter, call_ended
from .session_table import CallSessionTable
from .types import (
    Delivery,
    SignalMessage,
    MSG_REGISTER,
    MSG_USER_LIST,
    MSG_USER_DISCONNECTED,
    FIELD_IDENTITY,
    FIELD_IDENTITIES,
)
from ..infrastructure.logging import get_logger


class LifecycleManager:
    """Connection lifecycle and message entry point for one relay instance."""

    def __init__(
        self,
        registry: Optional[ConnectionRegistry] = None,
        sessions: Optional[CallSessionTable] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.registry = registry if registry is not None else ConnectionRegistry()
        self.sessions = sessions if sessions is not None else CallSessionTable()
        self.logger = logger or get_logger(__name__)
        self.router = MessageRouter(self.registry, self.sessions, logger)

        # Live handles in connection order, registered or not
        self._connections: Dict[Hashable, None] = {}

    @property
    def connections(self) -> List[Hashable]:
        return list(self._connections)

    def connect(self, handle: Hashable) -> None:
        """Track a new live connection. No identity is bound yet."""
        self._connections[handle] = None

    def handle_message(self, handle: Hashable, message: SignalMessage) -> List[Delivery]:
        """Process one inbound message from the connection ``handle``."""
        if message.kind == MSG_REGISTER:
            return self.register(handle, message.get(FIELD_IDENTITY))

        sender = self.registry.identity_for(handle)
        if sender is None:
            self.logger.warning(
                f"Dropping {message.kind} from a connection that has not registered"
            )
            return []
        return self.router.route(sender, message)

    def register(self, handle: Hashable, identity: str) -> List[Delivery]:
        """
        Bind ``identity`` to ``handle`` and broadcast the new presence set.

        A connection that switches to a different identity first departs
        under its old one.
        """
        deliveries: List[Delivery] = []
        self._connections.setdefault(handle, None)

        current = self.registry.identity_for(handle)
        if current is not None and current != identity:
            self.logger.info(f"Connection re-registering from {current} to {identity}")
            deliveries.extend(self._depart(current))

        previous = self.registry.register(identity, handle)
        if previous is not None and previous.handle != handle:
            self.logger.info(f"Identity {identity} moved to a new connection")
        else:
            self.logger.info(f"Identity registered: {identity}")

        deliveries.extend(self._broadcast(self._presence_message()))
        return deliveries

    def disconnect(self, handle: Hashable) -> List[Delivery]:
        """
        Forget a closed connection and clean up after its identity.

        Connections that never registered, or whose identity has since moved
        to another connection, leave presence and sessions untouched.
        """
        self._connections.pop(handle, None)

        identity = self.registry.identity_for(handle)
        if identity is None:
            self.logger.debug("Unregistered connection closed")
            return []
        return self._depart(identity)

    def _depart(self, identity: str) -> List[Delivery]:
        """End the identity's sessions, then remove it from presence."""
        deliveries: List[Delivery] = []

        for session in self.sessions.find_by_participant(identity):
            other = session.other_party(identity)
            other_handle = self.registry.lookup(other)
            if other_handle is not None:
                deliveries.append(
                    Delivery(handle=other_handle, message=call_ended(identity), recipient=other)
                )
            self.sessions.end(session.session_id)
            self.logger.info(f"Call between {identity} and {other} ended by departure")

        self.registry.unregister(identity)
        self.logger.info(f"Identity departed: {identity}")

        deliveries.extend(self._broadcast(self._presence_message()))
        deliveries.extend(
            self._broadcast(
                SignalMessage(MSG_USER_DISCONNECTED, {FIELD_IDENTITY: identity})
            )
        )
        return deliveries

    def _presence_message(self) -> SignalMessage:
        return SignalMessage(
            MSG_USER_LIST, {FIELD_IDENTITIES: sorted(self.registry.list_identities())}
        )

    def _broadcast(self, message: SignalMessage) -> List[Delivery]:
        """One delivery per connection live right now."""
        return [Delivery(handle=handle, message=message) for handle in self._connections]

    def get_stats(self) -> Dict[str, int]:
        return {
            "live_connections": len(self._connections),
            **self.registry.get_stats(),
            **self.sessions.get_stats(),
        }
