"""
Networking components for the signaling relay.

This package contains the WebSocket transport and the JSON wire codec.
"""

from .codec import decode_message, encode_message
from .signaling_server import SignalingServer

__all__ = [
    "SignalingServer",
    "decode_message",
    "encode_message",
]
