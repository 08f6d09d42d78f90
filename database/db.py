"""In-memory session store."""
from threading import Lock
from typing import Dict, Any, Optional

from sessions.models import FusionSession
from utils.logger import get_logger

logger = get_logger("database")


class InMemorySessionStore:
    """A tiny thread-safe in-memory store of fusion sessions.

    - Sessions are keyed by id and never leave process memory
    - Reads return copies; callers change sessions through update/begin/finish
    - begin_generation/finish_generation check and set the busy flag under the
      same lock, so only one generation runs per session at a time
    """

    def __init__(self):
        self._lock = Lock()
        self._sessions: Dict[str, FusionSession] = {}

    def create(self) -> FusionSession:
        """Create and store an empty session."""
        session = FusionSession()
        with self._lock:
            self._sessions[session.id] = session
        logger.info(f"Created session {session.id}")
        return session.model_copy(deep=True)

    def get(self, session_id: str) -> Optional[FusionSession]:
        with self._lock:
            session = self._sessions.get(session_id)
            return session.model_copy(deep=True) if session else None

    def update(self, session_id: str, patch: Dict[str, Any]) -> FusionSession:
        """Apply field changes to a session. Raises KeyError if it does not exist."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise KeyError("session not found")
            updated = session.model_copy(update=patch)
            self._sessions[session_id] = updated
            return updated.model_copy(deep=True)

    def delete(self, session_id: str) -> FusionSession:
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            raise KeyError("session not found")
        logger.info(f"Deleted session {session_id}")
        return session

    def begin_generation(self, session_id: str) -> Optional[FusionSession]:
        """
        Mark the session busy and clear the previous outcome.

        Returns a snapshot of the session taken at that moment, or None if a
        generation is already running. Raises KeyError if it does not exist.
        """
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise KeyError("session not found")
            if session.busy:
                return None
            updated = session.model_copy(update={"busy": True, "result_image": None, "error": None})
            self._sessions[session_id] = updated
            return updated.model_copy(deep=True)

    def finish_generation(self, session_id: str, patch: Dict[str, Any]) -> Optional[FusionSession]:
        """Clear the busy flag and record the outcome. A session deleted meanwhile is ignored."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                logger.warning(f"Session {session_id} was removed during generation")
                return None
            updated = session.model_copy(update={**patch, "busy": False})
            self._sessions[session_id] = updated
            return updated.model_copy(deep=True)

    def clear(self):
        with self._lock:
            self._sessions.clear()


# Global database instance
db = InMemorySessionStore()
