"""Event Recorder - append-only behavioral telemetry.

Single events and batches both resolve the owning user through the
Session Registry. A batch is validated item by item: malformed items are
counted and skipped, and every valid item is appended in one store update.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging

from pydantic import ValidationError as PydanticValidationError

from intellisoc.common.constants import Collections
from intellisoc.common.timeutils import Clock, utcnow
from intellisoc.data.schemas.device import DeviceInfo
from intellisoc.data.schemas.event_log import EventInput, EventRecord
from intellisoc.ledger.sessions import SessionRegistry
from intellisoc.storage import DurableStore, RecordCollection


logger = logging.getLogger(__name__)


class EventRecorder:
    """Records behavioral events against sessions."""

    def __init__(
        self,
        store: DurableStore,
        sessions: SessionRegistry,
        clock: Clock = utcnow,
    ):
        self.events: RecordCollection[EventRecord] = RecordCollection(
            store, Collections.EVENT_LOGS, EventRecord, id_field="log_id"
        )
        self.sessions = sessions
        self._clock = clock

    def _build(
        self,
        log_id: int,
        event: EventInput,
        user_id: Optional[str],
        source_address: str,
    ) -> EventRecord:
        device = event.device_info or DeviceInfo()
        return EventRecord(
            log_id=log_id,
            timestamp=event.timestamp or self._clock(),
            session_id=event.session_id,
            user_id=user_id,
            event_type=event.event_type,
            event_data=event.event_data or {},
            source_address=source_address,
            device_fingerprint=device.fingerprint,
            browser_info=device.browser,
            screen_info=device.screen,
            timezone_info=device.timezone,
            referrer=device.referrer,
            current_url=device.current_url,
        )

    def record_one(
        self,
        session_id: str,
        event_type: str,
        event_data: Optional[Dict[str, Any]],
        device_info: Optional[DeviceInfo],
        source_address: str,
        timestamp: Optional[datetime] = None,
    ) -> EventRecord:
        """Append one event and return the stored record (with its ``log_id``)."""
        event = EventInput(
            timestamp=timestamp,
            session_id=session_id,
            event_type=event_type,
            event_data=event_data,
            device_info=device_info,
        )
        session = self.sessions.find_by_session_id(session_id)
        user_id = session.user_id if session else None

        record = self.events.append(
            lambda log_id: self._build(log_id, event, user_id, source_address)
        )
        logger.debug(f"Event {record.log_id} ({event_type}) logged for session {session_id}")
        return record

    def record_batch(
        self,
        inputs: Sequence[Any],
        source_address: str,
    ) -> Tuple[int, int]:
        """Validate and append a batch of raw event payloads.

        Args:
            inputs: Raw event mappings as received from the client
            source_address: Client address the batch arrived from

        Returns:
            (logged_count, failed_count)
        """
        valid: List[EventInput] = []
        failed_count = 0
        for position, raw in enumerate(inputs):
            if not isinstance(raw, Mapping):
                logger.warning(f"Skipped batch event {position}: not an object")
                failed_count += 1
                continue
            try:
                valid.append(EventInput.model_validate(dict(raw)))
            except PydanticValidationError as e:
                logger.warning(
                    f"Skipped batch event {position}: {e.error_count()} validation error(s)"
                )
                failed_count += 1

        if valid:
            users = self.sessions.user_index()

            def build(first_id: int) -> List[EventRecord]:
                return [
                    self._build(
                        first_id + offset,
                        event,
                        users.get(event.session_id),
                        source_address,
                    )
                    for offset, event in enumerate(valid)
                ]

            self.events.append_many(build)

        logger.info(
            f"Batch from {source_address}: {len(valid)} logged, {failed_count} failed"
        )
        return len(valid), failed_count

    def all(self) -> List[EventRecord]:
        return self.events.all()
