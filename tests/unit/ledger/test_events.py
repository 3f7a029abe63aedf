"""Unit tests for the Event Recorder."""

import shutil
import tempfile
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

import pytest

from intellisoc.data.schemas.device import DeviceInfo
from intellisoc.ledger.events import EventRecorder
from intellisoc.ledger.sessions import SessionRegistry
from intellisoc.storage import JsonFileStore


@pytest.fixture
def store():
    temp_dir = tempfile.mkdtemp()
    store = JsonFileStore(temp_dir).open()
    yield store
    store.close()
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def registry(store):
    registry = SessionRegistry(store)
    registry.create(
        session_id="sess_known",
        user_id="1",
        device_fingerprint="fp_1",
        source_address="10.0.0.1",
        user_agent="pytest",
    )
    return registry


@pytest.fixture
def recorder(store, registry):
    return EventRecorder(store, registry)


def _event(event_type="click", session_id="sess_known", **extra):
    payload = {"sessionId": session_id, "eventType": event_type}
    payload.update(extra)
    return payload


class TestRecordOne:

    def test_resolves_user_from_session(self, recorder):
        record = recorder.record_one(
            session_id="sess_known",
            event_type="page_view",
            event_data={"path": "/"},
            device_info=DeviceInfo.model_validate({
                "fingerprint": "fp_9",
                "browser": {"userAgent": "Mozilla/5.0"},
                "screen": {"width": 1920},
                "timezone": {"name": "UTC"},
                "referrer": "https://example.com",
                "currentUrl": "https://bank.example/login",
            }),
            source_address="10.0.0.1",
        )

        assert record.log_id == 1
        assert record.user_id == "1"
        assert record.device_fingerprint == "fp_9"
        assert record.browser_info == {"userAgent": "Mozilla/5.0"}
        assert record.screen_info == {"width": 1920}
        assert record.timezone_info == {"name": "UTC"}
        assert record.current_url == "https://bank.example/login"

    def test_unknown_session_has_no_user(self, recorder):
        record = recorder.record_one("sess_unknown", "click", None, None, "10.0.0.1")

        assert record.user_id is None
        assert record.event_data == {}
        assert record.browser_info == {}

    def test_client_timestamp_kept(self, recorder):
        ts = datetime(2026, 1, 1, 8, 0, tzinfo=timezone.utc)
        record = recorder.record_one("sess_known", "click", None, None, "10.0.0.1", timestamp=ts)
        assert record.timestamp == ts

    def test_ids_increase(self, recorder):
        ids = [
            recorder.record_one("sess_known", "click", None, None, "10.0.0.1").log_id
            for _ in range(3)
        ]
        assert ids == [1, 2, 3]

    def test_concurrent_records_get_distinct_ids(self, recorder):
        def log(i):
            return recorder.record_one("sess_known", f"e{i}", None, None, "10.0.0.1").log_id

        with ThreadPoolExecutor(max_workers=16) as pool:
            ids = list(pool.map(log, range(40)))
        assert sorted(ids) == list(range(1, 41))


class TestRecordBatch:

    def test_three_valid_one_malformed(self, recorder):
        before = len(recorder.all())
        logged, failed = recorder.record_batch(
            [_event("a"), _event("b"), {"eventType": "no_session"}, _event("c")],
            source_address="10.0.0.1",
        )

        assert (logged, failed) == (3, 1)
        assert len(recorder.all()) == before + 3

    def test_non_object_items_fail(self, recorder):
        logged, failed = recorder.record_batch(
            [_event("a"), "garbage", 42, None], source_address="10.0.0.1"
        )
        assert (logged, failed) == (1, 3)

    def test_bad_timestamp_fails_item(self, recorder):
        logged, failed = recorder.record_batch(
            [_event("a", timestamp="not-a-time"), _event("b")],
            source_address="10.0.0.1",
        )
        assert (logged, failed) == (1, 1)

    def test_batch_ids_contiguous_from_max(self, recorder):
        recorder.record_one("sess_known", "first", None, None, "10.0.0.1")
        recorder.record_batch([_event("a"), _event("b"), _event("c")], "10.0.0.1")

        assert [r.log_id for r in recorder.all()] == [1, 2, 3, 4]

    def test_batch_resolves_users(self, recorder):
        recorder.record_batch(
            [_event("a"), _event("b", session_id="sess_other")], "10.0.0.1"
        )
        users = [r.user_id for r in recorder.all()]
        assert users == ["1", None]

    def test_all_malformed_writes_nothing(self, recorder):
        logged, failed = recorder.record_batch([{}, {"sessionId": "x"}], "10.0.0.1")
        assert (logged, failed) == (0, 2)
        assert recorder.all() == []


class TestMalformedStoredRecords:
    """Stored records that fail validation still reserve their ids."""

    def test_ids_continue_past_malformed_record(self, store, recorder):
        store.save("event_logs", [{"log_id": 5, "event_type": "", "session_id": "s"}])

        ids = [
            recorder.record_one("sess_known", "click", None, None, "10.0.0.1").log_id
            for _ in range(3)
        ]

        assert ids == [6, 7, 8]
        assert [r["log_id"] for r in store.load("event_logs")] == [5, 6, 7, 8]

    def test_batch_ids_continue_past_malformed_record(self, store, recorder):
        store.save("event_logs", [{"log_id": 9, "event_type": ""}])

        recorder.record_batch([_event("a"), _event("b")], "10.0.0.1")

        assert [r.log_id for r in recorder.all()] == [10, 11]
        assert len(store.load("event_logs")) == 3
