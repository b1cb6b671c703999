"""
Call session table for the signaling relay.

Tracks in-flight call negotiations keyed by the unordered pair of
identities, so either party finds the same session no matter who
initiated. Sessions hold identities only, never connection handles, which
lets a session survive a party reconnecting under the same identity.

State machine::

    REQUESTED --accept--> ACCEPTED
    REQUESTED --reject | end | disconnect--> ENDED
    ACCEPTED  --end | disconnect-----------> ENDED
    ACCEPTED  --call-request---------------> REQUESTED

ENDED is terminal and the record is purged, not archived.
"""

import time
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

SessionKey = Tuple[str, str]


def session_key(first: str, second: str) -> SessionKey:
    """Canonical, order-independent key for a pair of identities."""
    return (first, second) if first <= second else (second, first)


class CallState(Enum):
    """Lifecycle state of a call session."""

    REQUESTED = "requested"
    ACCEPTED = "accepted"
    ENDED = "ended"


@dataclass
class CallSession:
    """One call negotiation between exactly two identities."""

    session_id: SessionKey
    caller: str
    callee: str
    state: CallState = CallState.REQUESTED
    created_at: float = field(default_factory=time.time)

    @property
    def parties(self) -> Tuple[str, str]:
        return (self.caller, self.callee)

    def involves(self, identity: str) -> bool:
        return identity in self.parties

    def other_party(self, identity: str) -> str:
        """Return the counterpart of ``identity``."""
        if identity == self.caller:
            return self.callee
        if identity == self.callee:
            return self.caller
        raise ValueError(f"{identity!r} is not a party of session {self.session_id}")


class CallSessionTable:
    """In-memory table of live (non-ended) call sessions."""

    def __init__(self) -> None:
        self._sessions: Dict[SessionKey, CallSession] = {}

        # Map identity -> keys of live sessions it takes part in
        self._by_identity: Dict[str, Set[SessionKey]] = defaultdict(set)

    def open(self, caller: str, callee: str) -> SessionKey:
        """
        Open a session for the pair, or reuse the live one.

        A repeated request while the session is still REQUESTED is
        idempotent. A request on an ACCEPTED session is a redial: the same
        session goes back to REQUESTED with the new caller, so the callee's
        answer can be accepted again.
        """
        key = session_key(caller, callee)
        session = self._sessions.get(key)
        if session is not None:
            if session.state is CallState.ACCEPTED:
                session.caller, session.callee = caller, callee
                session.state = CallState.REQUESTED
            return key

        self._sessions[key] = CallSession(session_id=key, caller=caller, callee=callee)
        self._by_identity[caller].add(key)
        self._by_identity[callee].add(key)
        return key

    def accept(self, session_id: SessionKey, accepter: str) -> bool:
        """
        Move a session from REQUESTED to ACCEPTED.

        Returns False, changing nothing, when the session is absent, not in
        REQUESTED, or ``accepter`` is not one of its parties.
        """
        session = self._sessions.get(session_id)
        if session is None or session.state is not CallState.REQUESTED:
            return False
        # Either party may accept, so two crossed requests settle on one call
        if not session.involves(accepter):
            return False

        session.state = CallState.ACCEPTED
        return True

    def end(self, session_id: SessionKey) -> Optional[CallSession]:
        """
        End and purge a session. Idempotent.

        Returns:
            The ended session, or None if there was nothing to end.
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return None

        session.state = CallState.ENDED
        for identity in set(session.parties):
            keys = self._by_identity.get(identity)
            if keys is None:
                continue
            keys.discard(session_id)
            if not keys:
                del self._by_identity[identity]
        return session

    def find_by_participant(self, identity: str) -> List[CallSession]:
        """All live sessions in which ``identity`` is a party."""
        keys = self._by_identity.get(identity, ())
        return [self._sessions[key] for key in sorted(keys)]

    def get(self, session_id: SessionKey) -> Optional[CallSession]:
        return self._sessions.get(session_id)

    def __contains__(self, session_id: SessionKey) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def get_stats(self) -> Dict[str, int]:
        """Get session statistics by state."""
        accepted = sum(
            1 for s in self._sessions.values() if s.state is CallState.ACCEPTED
        )
        return {
            "active_sessions": len(self._sessions),
            "requested_sessions": len(self._sessions) - accepted,
            "accepted_sessions": accepted,
        }
