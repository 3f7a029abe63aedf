"""Record schemas for the ledger collections."""

from intellisoc.data.schemas.session import Session
from intellisoc.data.schemas.login_attempt import (
    AttemptStatus,
    FailureReason,
    LoginAttempt,
)
from intellisoc.data.schemas.reputation import ReputationRecord
from intellisoc.data.schemas.event_log import EventInput, EventRecord
from intellisoc.data.schemas.device import DeviceInfo

__all__ = [
    "Session",
    "AttemptStatus",
    "FailureReason",
    "LoginAttempt",
    "ReputationRecord",
    "EventRecord",
    "EventInput",
    "DeviceInfo",
]
