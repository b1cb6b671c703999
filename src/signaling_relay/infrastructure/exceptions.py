"""
Custom exceptions for the signaling relay.

Unreachable targets and stale session references are not errors: they are
silent no-ops handled by the core. Only configuration problems and malformed
inbound frames are raised.
"""


class SignalingRelayError(Exception):
    """Base exception for all signaling relay errors."""

    pass


class ConfigurationError(SignalingRelayError):
    """Raised when there are configuration-related errors."""

    pass


class MessageValidationError(SignalingRelayError):
    """Raised when an inbound frame is not a well-formed signaling message."""

    pass
