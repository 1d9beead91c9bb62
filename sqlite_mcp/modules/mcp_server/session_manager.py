"""Session registry - one entry per open SSE channel."""

import threading
import uuid
from typing import Any

from loguru import logger

from ...errors import SessionNotFound
from .channel import SseChannel


class SessionRegistry:
    """
    Maps session identifiers to live SSE channels.

    All access goes through register/lookup/unregister. Identifiers are
    uuid4 hex strings and are never handed out twice while registered.
    The registry does not close channels itself except on shutdown
    (``close_all``).
    """

    def __init__(self):
        self._sessions: dict[str, SseChannel] = {}
        self._lock = threading.Lock()
        logger.info("SessionRegistry initialized (in-memory)")

    def register(self, channel: SseChannel) -> str:
        """Store the channel under a fresh identifier and return it."""
        with self._lock:
            session_id = uuid.uuid4().hex
            while session_id in self._sessions:
                session_id = uuid.uuid4().hex
            self._sessions[session_id] = channel
        channel.session_id = session_id
        logger.info(f"Session registered: {session_id}")
        return session_id

    def lookup(self, session_id: str) -> SseChannel:
        """
        Return the channel registered under ``session_id``.

        Raises:
            SessionNotFound: no live session with that identifier
        """
        channel = self.get(session_id)
        if channel is None:
            raise SessionNotFound(session_id)
        return channel

    def get(self, session_id: str) -> SseChannel | None:
        with self._lock:
            return self._sessions.get(session_id)

    def unregister(self, session_id: str) -> None:
        """Drop a session. Unknown identifiers are ignored."""
        with self._lock:
            removed = self._sessions.pop(session_id, None)
        if removed is not None:
            logger.info(f"Session unregistered: {session_id}")

    def close_all(self) -> int:
        """
        Close and drop every registered channel (server shutdown).

        Returns:
            Number of sessions closed.
        """
        with self._lock:
            channels = list(self._sessions.values())
            self._sessions.clear()
        for channel in channels:
            channel.close()
        if channels:
            logger.info(f"Closed {len(channels)} open sessions")
        return len(channels)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def get_stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                "total_sessions": len(self._sessions),
                "session_ids": list(self._sessions.keys()),
            }
