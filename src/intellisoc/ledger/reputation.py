"""Reputation Engine - bounded trust score per source address.

Scoring:
- First observation: 95 on success, 90 on failure (a lenient prior)
- Each later success: +1, capped at 100
- Each later failure: -5, floored at 0, and counted as suspicious

``is_blocked`` is owned by a BlockingPolicy. The engine applies the policy
after every observation but never sets the flag itself.
"""

from enum import Enum
from typing import List, Optional, Protocol
import logging

from intellisoc.common.constants import Collections, ReputationConstants
from intellisoc.common.timeutils import Clock, utcnow
from intellisoc.data.schemas.reputation import ReputationRecord
from intellisoc.storage import DurableStore, RecordCollection


logger = logging.getLogger(__name__)


class LoginOutcome(str, Enum):
    """Outcome fed back into the engine."""
    SUCCESS = "success"
    FAILURE = "failure"


class BlockingPolicy(Protocol):
    """Decides ``is_blocked`` for a freshly updated record."""

    def apply(self, record: ReputationRecord) -> ReputationRecord:
        ...


class NoOpBlockingPolicy:
    """Leaves ``is_blocked`` untouched."""

    def apply(self, record: ReputationRecord) -> ReputationRecord:
        return record


def clamp_score(score: int) -> int:
    return max(ReputationConstants.SCORE_MIN, min(score, ReputationConstants.SCORE_MAX))


class ReputationEngine:
    """Maintains one ReputationRecord per source address."""

    def __init__(
        self,
        store: DurableStore,
        policy: Optional[BlockingPolicy] = None,
        clock: Clock = utcnow,
    ):
        self.records: RecordCollection[ReputationRecord] = RecordCollection(
            store, Collections.IP_REPUTATION, ReputationRecord
        )
        self.policy = policy or NoOpBlockingPolicy()
        self._clock = clock

    def _initial(self, address: str, outcome: LoginOutcome) -> ReputationRecord:
        now = self._clock()
        success = outcome == LoginOutcome.SUCCESS
        return ReputationRecord(
            address=address,
            reputation_score=(
                ReputationConstants.INITIAL_SCORE_SUCCESS
                if success
                else ReputationConstants.INITIAL_SCORE_FAILURE
            ),
            total_logins=1,
            failed_logins=0 if success else 1,
            successful_logins=1 if success else 0,
            suspicious_activities=0 if success else 1,
            first_seen=now,
            last_seen=now,
            is_blocked=False,
        )

    def _advance(self, record: ReputationRecord, outcome: LoginOutcome) -> ReputationRecord:
        changes = {
            "total_logins": record.total_logins + 1,
            "last_seen": max(self._clock(), record.first_seen),
        }
        if outcome == LoginOutcome.SUCCESS:
            changes["successful_logins"] = record.successful_logins + 1
            changes["reputation_score"] = clamp_score(
                record.reputation_score + ReputationConstants.SUCCESS_REWARD
            )
        else:
            changes["failed_logins"] = record.failed_logins + 1
            changes["suspicious_activities"] = record.suspicious_activities + 1
            changes["reputation_score"] = clamp_score(
                record.reputation_score - ReputationConstants.FAILURE_PENALTY
            )
        return ReputationRecord.model_validate({**record.model_dump(), **changes})

    def observe(self, address: str, outcome: LoginOutcome) -> ReputationRecord:
        """Fold one login outcome into the address's record and persist it."""
        outcome = LoginOutcome(outcome)
        observed: List[ReputationRecord] = []

        def apply(current: List[ReputationRecord]) -> List[ReputationRecord]:
            updated = list(current)
            for index, record in enumerate(updated):
                if record.address == address:
                    updated[index] = self.policy.apply(self._advance(record, outcome))
                    observed.append(updated[index])
                    break
            else:
                record = self.policy.apply(self._initial(address, outcome))
                updated.append(record)
                observed.append(record)
            return updated

        self.records.update(apply)
        record = observed[-1]
        logger.info(
            f"Reputation for {address}: score={record.reputation_score} "
            f"total={record.total_logins} failed={record.failed_logins}"
        )
        return record

    def lookup(self, address: str) -> Optional[ReputationRecord]:
        """Current record for the address, or None if never observed."""
        return self.records.find_last(lambda r: r.address == address)

    def all(self) -> List[ReputationRecord]:
        return self.records.all()
