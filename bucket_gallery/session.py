from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from typing import Optional, Tuple

from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired
from fastapi import Request

from .config import settings
from .models.gallery_state import GalleryState

logger = logging.getLogger(__name__)

serializer = URLSafeTimedSerializer(settings.APP_SECRET_KEY, salt="gallery-session")

COOKIE_NAME = "gallery_session"

def make_session_token(session_id: str) -> str:
    return serializer.dumps({"s": session_id})

def read_session_token(token: str, max_age_seconds: int) -> Optional[str]:
    try:
        data = serializer.loads(token, max_age=max_age_seconds)
        return data.get("s")
    except (BadSignature, SignatureExpired):
        return None


class SessionStore:
    """In-memory gallery states keyed by session id, least recently used evicted first."""

    def __init__(self, max_sessions: int = 256, threshold: float = 0.1) -> None:
        self.max_sessions = max_sessions
        self.threshold = threshold
        self._states: "OrderedDict[str, GalleryState]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._states)

    def get(self, session_id: Optional[str]) -> Optional[GalleryState]:
        if not session_id:
            return None
        state = self._states.get(session_id)
        if state is not None:
            self._states.move_to_end(session_id)
        return state

    def create(self) -> Tuple[str, GalleryState]:
        session_id = uuid.uuid4().hex
        state = GalleryState(threshold=self.threshold)
        self._states[session_id] = state
        while len(self._states) > self.max_sessions:
            dropped, _ = self._states.popitem(last=False)
            logger.info("Evicted gallery state for session %s", dropped)
        return session_id, state

    def get_or_create(self, session_id: Optional[str]) -> Tuple[str, GalleryState, bool]:
        state = self.get(session_id)
        if state is not None:
            return session_id, state, False
        new_id, state = self.create()
        return new_id, state, True


store = SessionStore(max_sessions=settings.MAX_SESSIONS, threshold=settings.VISIBILITY_THRESHOLD)

def get_session_id(request: Request) -> Optional[str]:
    token = request.cookies.get(COOKIE_NAME)
    if not token:
        return None
    return read_session_token(token, settings.SESSION_TTL_SECONDS)

def get_current_state(request: Request, sessions: SessionStore) -> Optional[GalleryState]:
    return sessions.get(get_session_id(request))
