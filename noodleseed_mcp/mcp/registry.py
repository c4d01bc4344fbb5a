"""
Session registry: the one shared mutable table of the server.

Mutations and lookups are serialized by a lock and never await while
holding it, so the registry is safe from the event loop and from worker
threads alike.
"""

import threading
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from ..core import DuplicateIdentity
from ..logging import get_logger

if TYPE_CHECKING:
    from .session import MCPSession


class SessionRegistry:
    """Maps session identity to its live session"""

    def __init__(self):
        self.logger = get_logger(__name__)
        self._sessions: Dict[str, "MCPSession"] = {}
        self._lock = threading.Lock()

    def register(self, session_id: str, session: "MCPSession") -> None:
        """
        Insert a new mapping.

        Raises:
            DuplicateIdentity: the identity is already registered
        """
        with self._lock:
            if session_id in self._sessions:
                raise DuplicateIdentity(session_id)
            self._sessions[session_id] = session
        self.logger.debug(f"Registered session {session_id[:8]}...")

    def lookup(self, session_id: str) -> Optional["MCPSession"]:
        with self._lock:
            return self._sessions.get(session_id)

    def remove(self, session_id: str, session: Optional["MCPSession"] = None) -> bool:
        """
        Delete the mapping if present; a no-op otherwise.

        When ``session`` is given the entry is only removed if it still maps
        to that exact instance, so a failed open attempt can never evict the
        session that legitimately owns the identity.

        Returns True when an entry was removed.
        """
        with self._lock:
            current = self._sessions.get(session_id)
            if current is None or (session is not None and current is not session):
                return False
            del self._sessions[session_id]
        self.logger.debug(f"Removed session {session_id[:8]}...")
        return True

    def snapshot(self) -> List["MCPSession"]:
        """Point-in-time list of registered sessions"""
        with self._lock:
            return list(self._sessions.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def get_status(self) -> Dict[str, Any]:
        """Summary of registered sessions for debugging"""
        sessions = self.snapshot()
        return {
            "active_sessions": len(sessions),
            "sessions": {
                session.identity[:8] + "...": session.describe()
                for session in sessions
            }
        }
