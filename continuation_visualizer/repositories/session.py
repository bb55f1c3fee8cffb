import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional, Dict

from ..state.models import SessionState


class SessionRepository(ABC):
    """
    Defines how the application accesses replay sessions.
    Each session owns its own MachineState; nothing is shared between them.
    """

    @abstractmethod
    def create(self) -> SessionState:
        """Creates a new empty session with a unique ID."""
        pass

    @abstractmethod
    def get(self, session_id: str) -> Optional[SessionState]:
        """Retrieves a session by ID."""
        pass

    @abstractmethod
    def save(self, session: SessionState):
        """Persists the session state."""
        pass

    @abstractmethod
    def delete(self, session_id: str) -> bool:
        """Deletes a session. Returns True if found and deleted."""
        pass


class InMemorySessionRepository(SessionRepository):
    """
    Uses an in-memory dictionary for session storage.
    Sessions live only as long as the process.
    """

    def __init__(self):
        self._store: Dict[str, SessionState] = {}

    def create(self) -> SessionState:
        new_id = str(uuid.uuid4())
        session = SessionState(session_id=new_id)
        self._store[new_id] = session
        return session

    def get(self, session_id: str) -> Optional[SessionState]:
        return self._store.get(session_id)

    def save(self, session: SessionState):
        if session.session_id not in self._store:
            raise ValueError(f"Session {session.session_id} does not exist.")
        session.updated_at = datetime.now(timezone.utc)
        self._store[session.session_id] = session

    def delete(self, session_id: str) -> bool:
        if session_id in self._store:
            del self._store[session_id]
            return True
        return False
