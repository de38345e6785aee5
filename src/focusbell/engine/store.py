"""In-memory registry of active sessions, one per user."""

from __future__ import annotations

from collections.abc import Iterator

from focusbell.errors import AlreadyActive
from focusbell.models.session import Session


class SessionStore:
    """Maps user IDs to their single active session.

    Sessions are held by reference; callers mutate the stored object.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def add(self, session: Session) -> None:
        """Store a session, raising AlreadyActive if the user has one."""
        if session.user_id in self._sessions:
            raise AlreadyActive()
        self._sessions[session.user_id] = session

    def get(self, user_id: str) -> Session | None:
        return self._sessions.get(user_id)

    def has(self, user_id: str) -> bool:
        return user_id in self._sessions

    def contains(self, session: Session) -> bool:
        """True if *session* itself (not just its user) is stored."""
        return self._sessions.get(session.user_id) is session

    def remove(self, session: Session) -> bool:
        """Remove *session* if it is the one stored for its user."""
        if self.contains(session):
            del self._sessions[session.user_id]
            return True
        return False

    def in_scope(self, scope_id: str) -> list[Session]:
        return [s for s in self._sessions.values() if s.scope_id == scope_id]

    def clear(self) -> list[Session]:
        sessions = list(self._sessions.values())
        self._sessions.clear()
        return sessions

    def __iter__(self) -> Iterator[Session]:
        return iter(list(self._sessions.values()))

    def __len__(self) -> int:
        return len(self._sessions)
