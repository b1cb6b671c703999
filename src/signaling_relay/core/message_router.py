"""
Message router for the signaling relay.

Dispatches every relayed message kind (everything except ``register``,
which the lifecycle manager owns) to the addressed identity, attaching the
sender's identity under a role-specific field so the recipient can reply
without a lookup of its own. Messages that affect a call's lifecycle open,
accept or end the pair's session on the way through.

Relays are best effort: an unreachable target or a stale session reference
drops the message silently. Nothing is queued or retried.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .connection_registry import ConnectionRegistry
from .session_table import CallSessionTable, session_key
from .types import (
    Delivery,
    SignalMessage,
    MSG_CALL_REQUEST,
    MSG_CALL_ACCEPTED,
    MSG_CALL_REJECTED,
    MSG_OFFER,
    MSG_ANSWER,
    MSG_ICE_CANDIDATE,
    MSG_END_CALL,
    MSG_CALL_RECEIVED,
    MSG_CALL_ENDED,
    FIELD_TARGET_IDENTITY,
    FIELD_CALLER_ID,
    FIELD_ACCEPTER_ID,
    FIELD_REJECTER_ID,
    FIELD_ANSWERER_ID,
    FIELD_SENDER_ID,
    FIELD_ENDER_ID,
    FIELD_OFFER,
    FIELD_ANSWER,
    FIELD_CANDIDATE,
)
from ..infrastructure.logging import get_logger

# Session effects
SESSION_OPEN = "open"
SESSION_ACCEPT = "accept"
SESSION_END = "end"


@dataclass(frozen=True)
class Route:
    """How one inbound kind is relayed."""

    outbound_kind: str
    target_field: str
    sender_field: str
    forwarded_fields: Tuple[str, ...] = ()
    session_effect: Optional[str] = None


ROUTES: Dict[str, Route] = {
    MSG_CALL_REQUEST: Route(
        MSG_CALL_RECEIVED, FIELD_TARGET_IDENTITY, FIELD_CALLER_ID,
        session_effect=SESSION_OPEN,
    ),
    MSG_CALL_ACCEPTED: Route(
        MSG_CALL_ACCEPTED, FIELD_CALLER_ID, FIELD_ACCEPTER_ID,
        session_effect=SESSION_ACCEPT,
    ),
    MSG_CALL_REJECTED: Route(
        MSG_CALL_REJECTED, FIELD_CALLER_ID, FIELD_REJECTER_ID,
        session_effect=SESSION_END,
    ),
    MSG_OFFER: Route(
        MSG_OFFER, FIELD_TARGET_IDENTITY, FIELD_CALLER_ID, (FIELD_OFFER,)
    ),
    MSG_ANSWER: Route(
        MSG_ANSWER, FIELD_TARGET_IDENTITY, FIELD_ANSWERER_ID, (FIELD_ANSWER,)
    ),
    MSG_ICE_CANDIDATE: Route(
        MSG_ICE_CANDIDATE, FIELD_TARGET_IDENTITY, FIELD_SENDER_ID, (FIELD_CANDIDATE,)
    ),
    MSG_END_CALL: Route(
        MSG_CALL_ENDED, FIELD_TARGET_IDENTITY, FIELD_ENDER_ID,
        session_effect=SESSION_END,
    ),
}


def call_ended(ender: str) -> SignalMessage:
    return SignalMessage(MSG_CALL_ENDED, {FIELD_ENDER_ID: ender})


class MessageRouter:
    """Routes signaling messages between registered identities."""

    def __init__(
        self,
        registry: ConnectionRegistry,
        sessions: CallSessionTable,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.registry = registry
        self.sessions = sessions
        self.logger = logger or get_logger(__name__)

    def route(self, sender: str, message: SignalMessage) -> List[Delivery]:
        """
        Route one message from ``sender``.

        Returns:
            The deliveries to perform; empty when the message is dropped.
        """
        route = ROUTES.get(message.kind)
        if route is None:
            self.logger.warning(f"No route for message kind: {message.kind}")
            return []

        target = message.get(route.target_field)
        if target == sender:
            self.logger.debug(f"Dropping {message.kind} from {sender} addressed to itself")
            return []

        handle = self.registry.lookup(target)
        if handle is None:
            self.logger.info(
                f"Target unreachable: {message.kind} from {sender} to {target} dropped"
            )
            return []

        if not self._apply_session_effect(route.session_effect, sender, target):
            self.logger.debug(
                f"Stale session reference: {message.kind} from {sender} to {target} ignored"
            )
            return []

        payload = {name: message.get(name) for name in route.forwarded_fields}
        payload[route.sender_field] = sender
        outbound = SignalMessage(route.outbound_kind, payload)

        self.logger.debug(f"Relaying {message.kind} {sender} -> {target}")
        return [Delivery(handle=handle, message=outbound, recipient=target)]

    def _apply_session_effect(
        self, effect: Optional[str], sender: str, target: str
    ) -> bool:
        """
        Apply the route's session effect.

        Returns False when the message refers to a session that does not
        exist or cannot make the transition; such messages are not relayed.
        """
        if effect is None:
            return True

        if effect == SESSION_OPEN:
            key = self.sessions.open(sender, target)
            self.logger.info(f"Call requested: {sender} -> {target} (session {key})")
            return True

        key = session_key(sender, target)
        if effect == SESSION_ACCEPT:
            if not self.sessions.accept(key, sender):
                return False
            self.logger.info(f"Call accepted: {sender} <- {target}")
            return True

        if effect == SESSION_END:
            if self.sessions.end(key) is None:
                return False
            self.logger.info(f"Call ended by {sender} with {target}")
            return True

        raise ValueError(f"Unknown session effect: {effect}")
