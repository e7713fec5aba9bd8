"""
In-process registry of live study sessions.

Sessions are evicted once they sit idle for too long; completed sessions
are kept for a shorter time so a restart is still possible.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional
from uuid import uuid4

from app.config import get_settings
from app.core.exceptions import StudySessionNotFoundError
from app.study.controller import StudySessionController

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _Entry:
    controller: StudySessionController
    last_seen: datetime


class StudySessionRegistry:
    """Maps session ids to controllers, scoped to the owning user."""

    def __init__(
        self,
        idle_timeout: timedelta = timedelta(minutes=120),
        completed_timeout: timedelta = timedelta(minutes=15),
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.idle_timeout = idle_timeout
        self.completed_timeout = completed_timeout
        self._clock = clock or _utcnow
        self._sessions: Dict[str, _Entry] = {}

    def add(self, controller: StudySessionController) -> str:
        self.evict_expired()

        session_id = str(uuid4())
        self._sessions[session_id] = _Entry(controller=controller, last_seen=self._clock())
        logger.info(
            f"[StudySessionRegistry] Registered session: {session_id} "
            f"for user: {controller.context.user_id}, set: {controller.set_id}"
        )
        return session_id

    def get(self, session_id: str, user_id: str) -> StudySessionController:
        """
        Look up a session and mark it as recently used.

        Raises:
            StudySessionNotFoundError: If the id is unknown, expired or owned by another user
        """
        self.evict_expired()

        entry = self._sessions.get(session_id)
        if entry is None or entry.controller.context.user_id != user_id:
            raise StudySessionNotFoundError(f"Study session not found: {session_id}")
        entry.last_seen = self._clock()
        return entry.controller

    def remove(self, session_id: str, user_id: str) -> None:
        self.get(session_id, user_id)
        del self._sessions[session_id]
        logger.info(f"[StudySessionRegistry] Removed session: {session_id}")

    def remove_for_set(self, set_id: str, user_id: str) -> int:
        """Drop every session the user has open on a set. Returns how many were dropped."""
        doomed = [
            session_id
            for session_id, entry in self._sessions.items()
            if entry.controller.set_id == set_id and entry.controller.context.user_id == user_id
        ]
        for session_id in doomed:
            del self._sessions[session_id]

        if doomed:
            logger.info(f"[StudySessionRegistry] Removed {len(doomed)} sessions on set: {set_id}")
        return len(doomed)

    def evict_expired(self) -> int:
        """Drop sessions idle past their timeout. Returns how many were dropped."""
        now = self._clock()
        expired = []
        for session_id, entry in self._sessions.items():
            timeout = self.completed_timeout if entry.controller.is_complete else self.idle_timeout
            if now - entry.last_seen > timeout:
                expired.append(session_id)

        for session_id in expired:
            del self._sessions[session_id]

        if expired:
            logger.info(f"[StudySessionRegistry] Evicted {len(expired)} idle sessions")
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)


_settings = get_settings()
_registry = StudySessionRegistry(
    idle_timeout=timedelta(minutes=_settings.study_session_idle_minutes),
    completed_timeout=timedelta(minutes=_settings.study_session_completed_minutes),
)


def get_session_registry() -> StudySessionRegistry:
    """The process-wide registry."""
    return _registry
