"""Ledger components - sessions, attempts, reputation, events."""

from intellisoc.ledger.sessions import SessionRegistry, generate_session_token
from intellisoc.ledger.attempts import AttemptLedger, StatsBucket, TimeRange
from intellisoc.ledger.reputation import (
    BlockingPolicy,
    LoginOutcome,
    NoOpBlockingPolicy,
    ReputationEngine,
)
from intellisoc.ledger.events import EventRecorder

__all__ = [
    "SessionRegistry",
    "generate_session_token",
    "AttemptLedger",
    "StatsBucket",
    "TimeRange",
    "BlockingPolicy",
    "LoginOutcome",
    "NoOpBlockingPolicy",
    "ReputationEngine",
    "EventRecorder",
]
