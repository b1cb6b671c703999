"""
Common types and constants for the signaling relay.

This module centralizes message kinds and payload field names so they are
not hardcoded throughout the codebase, and defines the two value types that
cross the core boundary: SignalMessage and Delivery.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Final, FrozenSet, Hashable, Optional

# Inbound message kinds (client -> server)
MSG_REGISTER: Final[str] = "register"
MSG_CALL_REQUEST: Final[str] = "call-request"
MSG_CALL_ACCEPTED: Final[str] = "call-accepted"
MSG_CALL_REJECTED: Final[str] = "call-rejected"
MSG_OFFER: Final[str] = "offer"
MSG_ANSWER: Final[str] = "answer"
MSG_ICE_CANDIDATE: Final[str] = "ice-candidate"
MSG_END_CALL: Final[str] = "end-call"

# Outbound-only message kinds (server -> client)
MSG_CALL_RECEIVED: Final[str] = "call-received"
MSG_CALL_ENDED: Final[str] = "call-ended"
MSG_USER_LIST: Final[str] = "userList"
MSG_USER_DISCONNECTED: Final[str] = "user-disconnected"

INBOUND_KINDS: FrozenSet[str] = frozenset(
    {
        MSG_REGISTER,
        MSG_CALL_REQUEST,
        MSG_CALL_ACCEPTED,
        MSG_CALL_REJECTED,
        MSG_OFFER,
        MSG_ANSWER,
        MSG_ICE_CANDIDATE,
        MSG_END_CALL,
    }
)

# Payload field names
FIELD_TYPE: Final[str] = "type"
FIELD_IDENTITY: Final[str] = "identity"
FIELD_IDENTITIES: Final[str] = "identities"
FIELD_TARGET_IDENTITY: Final[str] = "targetIdentity"
FIELD_CALLER_ID: Final[str] = "callerId"
FIELD_ACCEPTER_ID: Final[str] = "accepterId"
FIELD_REJECTER_ID: Final[str] = "rejecterId"
FIELD_ANSWERER_ID: Final[str] = "answererId"
FIELD_SENDER_ID: Final[str] = "senderId"
FIELD_ENDER_ID: Final[str] = "enderId"
FIELD_OFFER: Final[str] = "offer"
FIELD_ANSWER: Final[str] = "answer"
FIELD_CANDIDATE: Final[str] = "candidate"

# Field names used by older clients
LEGACY_FIELD_ALIASES: Dict[str, str] = {
    "targetUserId": FIELD_TARGET_IDENTITY,
    "userId": FIELD_IDENTITY,
}


@dataclass(frozen=True)
class SignalMessage:
    """A typed signaling message; on the wire it is ``{"type": kind, **payload}``."""

    kind: str
    payload: Dict[str, Any] = field(default_factory=dict)

    def get(self, name: str, default: Any = None) -> Any:
        return self.payload.get(name, default)

    def to_dict(self) -> Dict[str, Any]:
        return {FIELD_TYPE: self.kind, **self.payload}


@dataclass(frozen=True)
class Delivery:
    """
    One outbound effect produced by the core.

    ``handle`` is the opaque transport connection to send on. ``recipient`` is
    the addressed identity for relays and None for broadcast copies.
    """

    handle: Hashable
    message: SignalMessage
    recipient: Optional[str] = None
