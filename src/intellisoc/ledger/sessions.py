"""Session Registry - creates and looks up authenticated sessions."""

from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple
import logging
import secrets

from intellisoc.common.constants import Collections, SessionConstants
from intellisoc.common.timeutils import Clock, utcnow
from intellisoc.data.schemas.session import Session
from intellisoc.storage import DurableStore, RecordCollection


logger = logging.getLogger(__name__)


def generate_session_token() -> str:
    """256 bits from the OS CSPRNG, hex encoded."""
    return secrets.token_hex(SessionConstants.TOKEN_BYTES)


class SessionRegistry:
    """Append-only registry of sessions.

    Sessions are never deduplicated by ``session_id``; a reused id yields an
    additional record and lookups return the newest active one. ``expires_at``
    is recorded but not enforced here.
    """

    def __init__(
        self,
        store: DurableStore,
        default_ttl: timedelta = timedelta(hours=SessionConstants.DEFAULT_TTL_HOURS),
        clock: Clock = utcnow,
    ):
        self.sessions: RecordCollection[Session] = RecordCollection(
            store, Collections.SESSIONS, Session
        )
        self.default_ttl = default_ttl
        self._clock = clock

    def create(
        self,
        session_id: Optional[str],
        user_id: str,
        device_fingerprint: Optional[str],
        source_address: str,
        user_agent: Optional[str],
        ttl: Optional[timedelta] = None,
    ) -> Tuple[str, datetime]:
        """Create and persist a new active session.

        Returns:
            (session_token, expires_at)
        """
        now = self._clock()
        session = Session(
            session_id=session_id,
            user_id=user_id,
            session_token=generate_session_token(),
            device_fingerprint=device_fingerprint,
            source_address=source_address,
            user_agent=user_agent,
            created_at=now,
            expires_at=now + (ttl if ttl is not None else self.default_ttl),
            is_active=True,
        )
        self.sessions.append(lambda _: session)
        logger.info(f"Session created for user {user_id} (session_id={session_id})")
        return session.session_token, session.expires_at

    def find_by_session_id(self, session_id: Optional[str]) -> Optional[Session]:
        """Newest active session with this id, or None."""
        if not session_id:
            return None
        return self.sessions.find_last(
            lambda s: s.session_id == session_id and s.is_active
        )

    def all(self) -> List[Session]:
        return self.sessions.all()

    def user_index(self) -> Dict[str, str]:
        """Map each session_id to the user of its newest active session."""
        index: Dict[str, str] = {}
        for session in self.sessions.all():
            if session.session_id and session.is_active:
                index[session.session_id] = session.user_id
        return index
