"""Attempt Ledger - append-only login attempts and windowed statistics."""

from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional
import logging

from pydantic import BaseModel, Field

from intellisoc.common.constants import AnalyticsConstants, Collections
from intellisoc.common.timeutils import Clock, utcnow
from intellisoc.data.schemas.login_attempt import (
    AttemptStatus,
    FailureReason,
    LoginAttempt,
)
from intellisoc.storage import DurableStore, RecordCollection


logger = logging.getLogger(__name__)


class TimeRange(str, Enum):
    """Supported lookback windows for attempt statistics."""
    ONE_HOUR = "1h"
    ONE_DAY = "24h"
    ONE_WEEK = "7d"

    @property
    def lookback(self) -> timedelta:
        return _LOOKBACKS[self]

    @classmethod
    def parse(cls, value: Optional[str]) -> "TimeRange":
        """Parse a range string, falling back to 24h for unknown values."""
        if value is None:
            return cls(AnalyticsConstants.DEFAULT_TIME_RANGE)
        try:
            return cls(value)
        except ValueError:
            logger.warning(f"Unknown time range {value!r}, using 24h")
            return cls(AnalyticsConstants.DEFAULT_TIME_RANGE)


_LOOKBACKS = {
    TimeRange.ONE_HOUR: timedelta(hours=1),
    TimeRange.ONE_DAY: timedelta(hours=24),
    TimeRange.ONE_WEEK: timedelta(days=7),
}


class StatsBucket(BaseModel):
    """Aggregate for one attempt outcome."""
    count: int = Field(default=0, ge=0)
    unique_source_addresses: int = Field(default=0, ge=0)
    unique_usernames: int = Field(default=0, ge=0)


class AttemptLedger:
    """Records login attempts and answers time-windowed queries."""

    def __init__(self, store: DurableStore, clock: Clock = utcnow):
        self.attempts: RecordCollection[LoginAttempt] = RecordCollection(
            store, Collections.LOGIN_ATTEMPTS, LoginAttempt, id_field="attempt_id"
        )
        self._clock = clock

    def record(
        self,
        username: str,
        user_id: Optional[str],
        session_id: Optional[str],
        source_address: str,
        device_fingerprint: Optional[str],
        user_agent: Optional[str],
        secret_length: int,
        remember_me: bool,
        status: AttemptStatus,
        failure_reason: Optional[FailureReason] = None,
    ) -> int:
        """Append an attempt and return its ``attempt_id``.

        The id is assigned inside the collection lock, so concurrent
        callers never receive the same id.
        """
        timestamp = self._clock()

        def build(attempt_id: int) -> LoginAttempt:
            return LoginAttempt(
                attempt_id=attempt_id,
                timestamp=timestamp,
                username=username,
                user_id=user_id,
                session_id=session_id,
                source_address=source_address,
                device_fingerprint=device_fingerprint,
                user_agent=user_agent,
                secret_length=secret_length,
                remember_me=bool(remember_me),
                attempt_status=status,
                failure_reason=failure_reason,
            )

        attempt = self.attempts.append(build)
        logger.info(
            f"Login attempt {attempt.attempt_id} recorded: {status.value} "
            f"for {username!r} from {source_address}"
        )
        return attempt.attempt_id

    def stats(
        self,
        time_range: TimeRange = TimeRange.ONE_DAY,
        now: Optional[datetime] = None,
    ) -> Dict[str, StatsBucket]:
        """Per-outcome counts for attempts strictly after ``now - lookback``."""
        now = now or self._clock()
        threshold = now - TimeRange(time_range).lookback
        recent = [a for a in self.attempts.all() if a.timestamp > threshold]

        buckets: Dict[str, StatsBucket] = {}
        for status in AttemptStatus:
            matching = [a for a in recent if a.attempt_status == status]
            buckets[status.value] = StatsBucket(
                count=len(matching),
                unique_source_addresses=len({a.source_address for a in matching}),
                unique_usernames=len({a.username for a in matching}),
            )
        return buckets

    def all(self) -> List[LoginAttempt]:
        return self.attempts.all()
