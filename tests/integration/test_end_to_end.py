"""Integration tests for IntelliSOC.

End-to-end scenarios through the MonitoringService over a real store.
"""

import re
import shutil
import tempfile
from concurrent.futures import ThreadPoolExecutor

import pytest

from intellisoc.api.service import MonitoringService
from intellisoc.common.config import Config
from intellisoc.data.schemas.event_log import EventInput
from intellisoc.data.schemas.login_attempt import AttemptStatus, FailureReason
from intellisoc.ledger.attempts import TimeRange
from intellisoc.storage import JsonFileStore


class TestLoginScenarios:
    """Scenarios from a freshly initialised system."""

    @pytest.fixture
    def data_dir(self):
        temp_dir = tempfile.mkdtemp()
        yield temp_dir
        shutil.rmtree(temp_dir, ignore_errors=True)

    @pytest.fixture
    def service(self, data_dir):
        store = JsonFileStore(data_dir).open()
        yield MonitoringService(store, config=Config())
        store.close()

    def test_admin_login_success(self, service):
        result = service.login("admin", "admin123", "10.1.1.1", session_id="sess_a")

        assert result.succeeded
        assert re.fullmatch(r"[0-9a-f]{32,}", result.session_token)
        rep = service.reputation.lookup("10.1.1.1")
        assert (rep.reputation_score, rep.total_logins,
                rep.successful_logins, rep.failed_logins) == (95, 1, 1, 0)
        assert service.sessions.find_by_session_id("sess_a").user_id == "1"

    def test_admin_wrong_password_twice(self, service):
        first = service.login("admin", "wrongpass", "10.1.1.2")

        assert first.status == AttemptStatus.FAILURE
        assert first.failure_reason == FailureReason.INVALID_PASSWORD
        assert first.session_token is None
        rep = service.reputation.lookup("10.1.1.2")
        assert (rep.reputation_score, rep.total_logins, rep.failed_logins) == (90, 1, 1)

        service.login("admin", "wrongpass", "10.1.1.2")
        assert service.reputation.lookup("10.1.1.2").reputation_score == 85
        assert service.sessions.all() == []

    def test_unknown_user_recorded_without_user_id(self, service):
        result = service.login("mallory", "x", "10.1.1.3")

        attempt = service.attempts.all()[0]
        assert result.failure_reason == FailureReason.USER_NOT_FOUND
        assert attempt.user_id is None
        assert attempt.secret_length == 1

    def test_batch_three_valid_one_malformed(self, service):
        before = len(service.events.all())
        logged, failed = service.log_batch(
            [
                {"sessionId": "s", "eventType": "focus"},
                {"sessionId": "s", "eventType": "blur"},
                {"sessionId": "s", "eventType": "visibility_change"},
                {"sessionId": "s"},
            ],
            "10.1.1.4",
        )
        assert (logged, failed) == (3, 1)
        assert len(service.events.all()) == before + 3

    def test_events_follow_login(self, service):
        service.login("user1", "password123", "10.1.1.5", session_id="sess_u1")
        record = service.log_event(
            EventInput.model_validate({"sessionId": "sess_u1", "eventType": "devtools_open"}),
            "10.1.1.5",
        )
        assert record.user_id == "2"

    def test_state_survives_restart(self, data_dir, service):
        service.login("admin", "admin123", "10.1.1.6", session_id="sess_r")
        service.shutdown()

        with JsonFileStore(data_dir) as store:
            reopened = MonitoringService(store, config=Config())
            assert reopened.reputation.lookup("10.1.1.6").total_logins == 1
            assert reopened.sessions.find_by_session_id("sess_r") is not None
            assert len(reopened.attempts.all()) == 1

    def test_concurrent_logins_lose_nothing(self, service):
        """Parallel logins from one address keep every attempt and observation."""
        def attempt(i):
            password = "admin123" if i % 2 == 0 else "wrong"
            return service.login("admin", password, "10.1.1.7", session_id=f"s{i}")

        with ThreadPoolExecutor(max_workers=12) as pool:
            results = list(pool.map(attempt, range(40)))

        ids = sorted(r.attempt_id for r in results)
        assert ids == list(range(1, 41))

        rep = service.reputation.lookup("10.1.1.7")
        assert rep.total_logins == 40
        assert rep.successful_logins == 20
        assert rep.failed_logins == 20
        assert len(service.sessions.all()) == 20

        stats = service.login_stats("1h")
        assert stats["SUCCESS"].count == 20
        assert stats["FAILURE"].count == 20

    def test_hour_stats_within_day_stats(self, service):
        for i in range(5):
            service.login("admin", "admin123" if i % 2 else "bad", f"10.2.0.{i}")

        short = service.attempts.stats(TimeRange.ONE_HOUR)
        long = service.attempts.stats(TimeRange.ONE_DAY)
        for status in ("SUCCESS", "FAILURE"):
            assert short[status].count <= long[status].count
