"""
JSON wire codec for signaling messages.

Inbound frames are JSON objects carrying a ``type`` and the fields listed in
REQUIRED_FIELDS. Validation happens here, at the boundary, so the core only
ever sees well-formed messages. Offer, answer and candidate bodies are
checked for presence only and otherwise passed through untouched.
"""

import json
from typing import Any, Dict, Tuple

from ..core.types import (
    SignalMessage,
    INBOUND_KINDS,
    LEGACY_FIELD_ALIASES,
    MSG_REGISTER,
    MSG_CALL_REQUEST,
    MSG_CALL_ACCEPTED,
    MSG_CALL_REJECTED,
    MSG_OFFER,
    MSG_ANSWER,
    MSG_ICE_CANDIDATE,
    MSG_END_CALL,
    FIELD_TYPE,
    FIELD_IDENTITY,
    FIELD_TARGET_IDENTITY,
    FIELD_CALLER_ID,
    FIELD_OFFER,
    FIELD_ANSWER,
    FIELD_CANDIDATE,
)
from ..infrastructure.exceptions import MessageValidationError

# kind -> (identity fields, opaque body fields)
REQUIRED_FIELDS: Dict[str, Tuple[Tuple[str, ...], Tuple[str, ...]]] = {
    MSG_REGISTER: ((FIELD_IDENTITY,), ()),
    MSG_CALL_REQUEST: ((FIELD_TARGET_IDENTITY,), ()),
    MSG_CALL_ACCEPTED: ((FIELD_CALLER_ID,), ()),
    MSG_CALL_REJECTED: ((FIELD_CALLER_ID,), ()),
    MSG_OFFER: ((FIELD_TARGET_IDENTITY,), (FIELD_OFFER,)),
    MSG_ANSWER: ((FIELD_TARGET_IDENTITY,), (FIELD_ANSWER,)),
    MSG_ICE_CANDIDATE: ((FIELD_TARGET_IDENTITY,), (FIELD_CANDIDATE,)),
    MSG_END_CALL: ((FIELD_TARGET_IDENTITY,), ()),
}


def _apply_aliases(data: Dict[str, Any]) -> Dict[str, Any]:
    for legacy, canonical in LEGACY_FIELD_ALIASES.items():
        if canonical not in data and legacy in data:
            data[canonical] = data[legacy]
    return data


def decode_message(raw: str) -> SignalMessage:
    """
    Parse and validate one inbound text frame.

    Raises:
        MessageValidationError: If the frame is not a well-formed client message
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MessageValidationError(f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MessageValidationError("Message must be a JSON object")

    kind = data.get(FIELD_TYPE)
    if not isinstance(kind, str) or not kind:
        raise MessageValidationError("Missing message type")
    if kind not in INBOUND_KINDS:
        raise MessageValidationError(f"Unknown message type: {kind}")

    data = _apply_aliases(data)
    identity_fields, body_fields = REQUIRED_FIELDS[kind]

    payload: Dict[str, Any] = {}
    for name in identity_fields:
        value = data.get(name)
        if not isinstance(value, str) or not value.strip():
            raise MessageValidationError(f"{kind}: '{name}' must be a non-empty string")
        payload[name] = value
    for name in body_fields:
        if data.get(name) is None:
            raise MessageValidationError(f"{kind}: missing '{name}'")
        payload[name] = data[name]

    return SignalMessage(kind, payload)


def encode_message(message: SignalMessage) -> str:
    """Serialize an outbound message to a JSON text frame."""
    return json.dumps(message.to_dict(), separators=(",", ":"))
