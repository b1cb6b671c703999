"""
Connection registry for the signaling relay.

Bidirectional mapping between a stable identity and its current live
connection handle, with O(1) lookups in both directions. The registry is
pure state: it never broadcasts and never closes connections.
"""

import time
from dataclasses import dataclass, field
from typing import Dict, Hashable, Optional, Set


@dataclass
class Endpoint:
    """The live connection currently bound to an identity."""

    identity: str
    handle: Hashable
    registered_at: float = field(default_factory=time.time)


class ConnectionRegistry:
    """Identity <-> connection handle registry."""

    def __init__(self) -> None:
        # Map identity -> Endpoint
        self._endpoints: Dict[str, Endpoint] = {}

        # Map handle -> identity, for disconnect cleanup
        self._identities: Dict[Hashable, str] = {}

    def register(self, identity: str, handle: Hashable) -> Optional[Endpoint]:
        """
        Bind identity to handle, replacing any prior binding (last writer wins).

        The superseded handle keeps its connection; it just no longer answers
        for ``identity``.

        Returns:
            The endpoint that was replaced, if any.
        """
        previous = self._endpoints.get(identity)
        if previous is not None and self._identities.get(previous.handle) == identity:
            del self._identities[previous.handle]

        self._endpoints[identity] = Endpoint(identity=identity, handle=handle)
        self._identities[handle] = identity
        return previous

    def unregister(self, identity: str) -> Optional[Endpoint]:
        """Remove the binding for identity. No-op if absent."""
        endpoint = self._endpoints.pop(identity, None)
        if endpoint is not None and self._identities.get(endpoint.handle) == identity:
            del self._identities[endpoint.handle]
        return endpoint

    def lookup(self, identity: str) -> Optional[Hashable]:
        """Get the live handle for an identity - O(1) lookup."""
        endpoint = self._endpoints.get(identity)
        return endpoint.handle if endpoint is not None else None

    def identity_for(self, handle: Hashable) -> Optional[str]:
        """Get the identity currently bound to a handle - O(1) lookup."""
        return self._identities.get(handle)

    def get_endpoint(self, identity: str) -> Optional[Endpoint]:
        return self._endpoints.get(identity)

    def is_registered(self, identity: str) -> bool:
        """Check if identity is registered."""
        return identity in self._endpoints

    def list_identities(self) -> Set[str]:
        """Snapshot of the presence set."""
        return set(self._endpoints)

    def __len__(self) -> int:
        return len(self._endpoints)

    def get_stats(self) -> Dict[str, int]:
        """Get registry statistics."""
        return {
            "registered_identities": len(self._endpoints),
        }
