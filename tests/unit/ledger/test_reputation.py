"""Unit tests for the Reputation Engine."""

import random
import shutil
import tempfile
from datetime import datetime, timedelta, timezone

import pytest

from intellisoc.data.schemas.reputation import ReputationRecord
from intellisoc.ledger.reputation import (
    LoginOutcome,
    NoOpBlockingPolicy,
    ReputationEngine,
)
from intellisoc.storage import JsonFileStore


class SteppingClock:
    """Advances one second per call."""

    def __init__(self):
        self.now = datetime(2026, 1, 25, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def store():
    temp_dir = tempfile.mkdtemp()
    store = JsonFileStore(temp_dir).open()
    yield store
    store.close()
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def engine(store):
    return ReputationEngine(store, clock=SteppingClock())


class TestFirstObservation:
    """Lenient priors for first-seen addresses."""

    def test_first_success_scores_95(self, engine):
        record = engine.observe("10.0.0.1", LoginOutcome.SUCCESS)

        assert record.reputation_score == 95
        assert record.total_logins == 1
        assert record.successful_logins == 1
        assert record.failed_logins == 0
        assert record.suspicious_activities == 0
        assert record.is_blocked is False

    def test_first_failure_scores_90(self, engine):
        record = engine.observe("10.0.0.1", LoginOutcome.FAILURE)

        assert record.reputation_score == 90
        assert record.total_logins == 1
        assert record.failed_logins == 1
        assert record.suspicious_activities == 1

    def test_accepts_plain_strings(self, engine):
        assert engine.observe("10.0.0.1", "failure").reputation_score == 90


class TestSubsequentObservations:

    def test_second_failure_drops_to_85(self, engine):
        engine.observe("10.0.0.2", LoginOutcome.FAILURE)
        record = engine.observe("10.0.0.2", LoginOutcome.FAILURE)

        assert record.reputation_score == 85
        assert record.failed_logins == 2
        assert record.suspicious_activities == 2

    def test_success_capped_at_100(self, engine):
        for _ in range(10):
            record = engine.observe("10.0.0.3", LoginOutcome.SUCCESS)
        assert record.reputation_score == 100
        assert record.successful_logins == 10

    def test_failure_floored_at_0(self, engine):
        for _ in range(30):
            record = engine.observe("10.0.0.4", LoginOutcome.FAILURE)
        assert record.reputation_score == 0

    def test_first_seen_fixed_last_seen_moves(self, engine):
        first = engine.observe("10.0.0.5", LoginOutcome.SUCCESS)
        later = engine.observe("10.0.0.5", LoginOutcome.FAILURE)

        assert later.first_seen == first.first_seen
        assert later.last_seen > first.last_seen

    def test_addresses_are_independent(self, engine):
        engine.observe("10.0.0.6", LoginOutcome.FAILURE)
        record = engine.observe("10.0.0.7", LoginOutcome.SUCCESS)

        assert record.reputation_score == 95
        assert len(engine.all()) == 2

    def test_random_sequences_hold_invariants(self, engine):
        """Counters add up, score stays bounded and moves the right way."""
        rng = random.Random(7)
        previous = None
        for _ in range(200):
            outcome = rng.choice(list(LoginOutcome))
            record = engine.observe("10.0.0.8", outcome)

            assert record.total_logins == record.successful_logins + record.failed_logins
            assert 0 <= record.reputation_score <= 100
            assert record.first_seen <= record.last_seen
            if previous is not None:
                if outcome == LoginOutcome.SUCCESS:
                    assert record.reputation_score >= previous.reputation_score
                else:
                    assert record.reputation_score <= previous.reputation_score
            previous = record


class TestLookup:

    def test_unknown_address_is_none(self, engine):
        assert engine.lookup("192.0.2.1") is None

    def test_lookup_returns_persisted_record(self, store, engine):
        engine.observe("10.0.0.9", LoginOutcome.FAILURE)

        reloaded = ReputationEngine(store)
        record = reloaded.lookup("10.0.0.9")
        assert record is not None
        assert record.reputation_score == 90


class TestBlockingPolicy:

    def test_noop_policy_never_blocks(self, engine):
        for _ in range(25):
            record = engine.observe("10.0.0.10", LoginOutcome.FAILURE)
        assert record.reputation_score == 0
        assert record.is_blocked is False

    def test_noop_policy_returns_record_unchanged(self):
        now = datetime.now(timezone.utc)
        record = ReputationRecord(
            address="a", reputation_score=50, first_seen=now, last_seen=now,
        )
        assert NoOpBlockingPolicy().apply(record) is record

    def test_custom_policy_controls_flag(self, store):
        class BlockBelow80:
            def apply(self, record):
                return record.model_copy(
                    update={"is_blocked": record.reputation_score < 80}
                )

        engine = ReputationEngine(store, policy=BlockBelow80())
        engine.observe("10.0.0.11", LoginOutcome.FAILURE)  # 90
        engine.observe("10.0.0.11", LoginOutcome.FAILURE)  # 85
        engine.observe("10.0.0.11", LoginOutcome.FAILURE)  # 80
        record = engine.observe("10.0.0.11", LoginOutcome.FAILURE)  # 75

        assert record.is_blocked is True
        assert engine.lookup("10.0.0.11").is_blocked is True


class TestRecordInvariants:

    def test_inconsistent_counters_rejected(self):
        now = datetime.now(timezone.utc)
        with pytest.raises(ValueError):
            ReputationRecord(
                address="a", reputation_score=90, total_logins=2,
                failed_logins=1, successful_logins=0,
                first_seen=now, last_seen=now,
            )

    def test_score_out_of_range_rejected(self):
        now = datetime.now(timezone.utc)
        with pytest.raises(ValueError):
            ReputationRecord(
                address="a", reputation_score=101, first_seen=now, last_seen=now,
            )


class TestMalformedStoredRecords:
    """Records that fail validation are never deleted by later observations."""

    BROKEN = {
        "address": "10.0.0.1",
        "reputation_score": 40,
        "total_logins": 7,
        "failed_logins": 1,
        "successful_logins": 1,
        "suspicious_activities": 1,
        "first_seen": "2026-01-25T10:00:00+00:00",
        "last_seen": "2026-01-25T11:00:00+00:00",
        "is_blocked": True,
    }

    def test_other_address_keeps_broken_record(self, store, engine):
        store.save("ip_reputation", [dict(self.BROKEN)])

        engine.observe("10.0.0.2", LoginOutcome.SUCCESS)

        raw = store.load("ip_reputation")
        assert [r["address"] for r in raw] == ["10.0.0.1", "10.0.0.2"]
        assert raw[0] == self.BROKEN

    def test_broken_record_keeps_its_position(self, store, engine):
        engine.observe("10.0.0.2", LoginOutcome.SUCCESS)
        store.save("ip_reputation", [dict(self.BROKEN)] + store.load("ip_reputation"))

        engine.observe("10.0.0.2", LoginOutcome.FAILURE)

        raw = store.load("ip_reputation")
        assert [r["address"] for r in raw] == ["10.0.0.1", "10.0.0.2"]
        assert raw[0]["is_blocked"] is True
        assert raw[1]["total_logins"] == 2
