"""
Session table: handle -> ProcessingSession

The only state shared between threads. A single lock guards the mapping
and is held just for the lookup or mutation, never while a session renders.
"""

import itertools
import logging
import threading
from typing import Dict, List, Optional

from .session import ProcessingSession

logger = logging.getLogger(__name__)


class SessionTable:
    """Thread-safe registry of processing sessions"""

    def __init__(self):
        self._sessions: Dict[int, ProcessingSession] = {}
        self._lock = threading.Lock()
        self._handles = itertools.count(1)

    def create(self, session: ProcessingSession) -> int:
        """Register ``session`` and return its new handle"""
        with self._lock:
            handle = next(self._handles)
            self._sessions[handle] = session
        logger.info(f"Session {handle} created")
        return handle

    def destroy(self, handle: int) -> bool:
        """
        Remove and clear a session

        Returns:
            False for unknown handles (nothing happens)
        """
        with self._lock:
            session = self._sessions.pop(handle, None)
        if session is None:
            logger.debug(f"Destroy of unknown session {handle} ignored")
            return False
        session.clear()
        logger.info(f"Session {handle} destroyed")
        return True

    def get(self, handle: int) -> Optional[ProcessingSession]:
        with self._lock:
            return self._sessions.get(handle)

    def handles(self) -> List[int]:
        with self._lock:
            return sorted(self._sessions)

    def clear_all(self) -> int:
        """Destroy every session; returns how many there were"""
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session.clear()
        if sessions:
            logger.info(f"Destroyed {len(sessions)} sessions")
        return len(sessions)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, handle: int) -> bool:
        with self._lock:
            return handle in self._sessions
