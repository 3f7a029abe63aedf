"""Monitoring Service - orchestrates the ledger components for the API.

This service owns the single store instance and wires the Session
Registry, Attempt Ledger, Reputation Engine and Event Recorder on top of it,
providing a clean interface for the API layer.

Login flow:
1. Read the address's reputation (a blocked address is refused)
2. Verify credentials with the user directory
3. Append the attempt to the Attempt Ledger
4. Feed the outcome into the Reputation Engine
5. On success, create a session

The steps touch different collections with no cross-collection
transaction. If a later step fails the earlier records stay; that is a
recoverable inconsistency, not corruption.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging

from intellisoc.auth.directory import InMemoryUserDirectory, UserAccount, UserDirectory
from intellisoc.auth.geolocation import Geolocator, Location, StaticGeolocator
from intellisoc.common.config import Config
from intellisoc.common.constants import Collections
from intellisoc.common.exceptions import NotFoundError, ValidationError
from intellisoc.data.schemas.device import DeviceInfo
from intellisoc.data.schemas.event_log import EventInput, EventRecord
from intellisoc.data.schemas.login_attempt import AttemptStatus, FailureReason
from intellisoc.data.schemas.reputation import ReputationRecord
from intellisoc.ledger.attempts import AttemptLedger, StatsBucket, TimeRange
from intellisoc.ledger.events import EventRecorder
from intellisoc.ledger.reputation import BlockingPolicy, LoginOutcome, ReputationEngine
from intellisoc.ledger.sessions import SessionRegistry
from intellisoc.storage import DurableStore, JsonFileStore


logger = logging.getLogger(__name__)


@dataclass
class LoginResult:
    """Outcome of a login request as seen by the HTTP layer."""
    attempt_id: int
    status: AttemptStatus
    reputation: ReputationRecord
    failure_reason: Optional[FailureReason] = None
    user: Optional[UserAccount] = None
    session_id: Optional[str] = None
    session_token: Optional[str] = None
    expires_at: Optional[datetime] = None

    @property
    def succeeded(self) -> bool:
        return self.status == AttemptStatus.SUCCESS


class MonitoringService:
    """Service for recording logins and telemetry and answering analytics.

    Error Handling:
    - Missing required input raises ValidationError before anything is persisted
    - Unknown reputation addresses raise NotFoundError
    - Store write failures propagate as StorageError
    """

    def __init__(
        self,
        store: DurableStore,
        config: Optional[Config] = None,
        directory: Optional[UserDirectory] = None,
        geolocator: Optional[Geolocator] = None,
        blocking_policy: Optional[BlockingPolicy] = None,
    ):
        """Initialize the service.

        Args:
            store: Opened durable store shared by every component.
            config: Configuration. Created from the environment if not provided.
            directory: Credential verification capability. Demo users if not provided.
            geolocator: Geolocation capability. Static demo location if not provided.
            blocking_policy: Reputation blocking policy. No-op if not provided.
        """
        self.config = config or Config()
        self.store = store
        self.directory = directory or InMemoryUserDirectory()
        self.geolocator = geolocator or StaticGeolocator()

        self.sessions = SessionRegistry(store, default_ttl=self.config.session_ttl)
        self.attempts = AttemptLedger(store)
        self.reputation = ReputationEngine(store, policy=blocking_policy)
        self.events = EventRecorder(store, self.sessions)

    @classmethod
    def from_config(cls, config: Config) -> "MonitoringService":
        """Build a service over a freshly opened JSON file store."""
        store = JsonFileStore(
            str(config.data_dir),
            fsync_on_write=config.fsync_on_write,
        ).open()
        return cls(store, config=config)

    def shutdown(self) -> None:
        """Close the underlying store."""
        self.store.close()
        logger.info("MonitoringService store closed")

    # -------------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------------

    def login(
        self,
        username: Optional[str],
        password: Optional[str],
        source_address: str,
        session_id: Optional[str] = None,
        device_info: Optional[DeviceInfo] = None,
        remember_me: Optional[bool] = False,
    ) -> LoginResult:
        """Authenticate and record a login attempt.

        Raises:
            ValidationError: If username or password is missing
        """
        if not username or not password:
            raise ValidationError("Username and password required")

        device = device_info or DeviceInfo()
        prior = self.reputation.lookup(source_address)
        account = self.directory.resolve(username)

        if prior is not None and prior.is_blocked:
            failure_reason = FailureReason.ADDRESS_BLOCKED
        elif account is None:
            failure_reason = FailureReason.USER_NOT_FOUND
        elif not self.directory.verify_credentials(username, password):
            failure_reason = FailureReason.INVALID_PASSWORD
        else:
            failure_reason = None

        status = AttemptStatus.FAILURE if failure_reason else AttemptStatus.SUCCESS
        attempt_id = self.attempts.record(
            username=username,
            user_id=account.user_id if account else None,
            session_id=session_id,
            source_address=source_address,
            device_fingerprint=device.fingerprint,
            user_agent=device.user_agent,
            secret_length=len(password),
            remember_me=bool(remember_me),
            status=status,
            failure_reason=failure_reason,
        )
        reputation = self.reputation.observe(
            source_address,
            LoginOutcome.FAILURE if failure_reason else LoginOutcome.SUCCESS,
        )

        result = LoginResult(
            attempt_id=attempt_id,
            status=status,
            reputation=reputation,
            failure_reason=failure_reason,
            user=account,
            session_id=session_id,
        )
        if failure_reason is not None:
            logger.warning(
                f"Login failed for {username!r} from {source_address}: {failure_reason.value}"
            )
            return result

        result.session_token, result.expires_at = self.sessions.create(
            session_id=session_id,
            user_id=account.user_id,
            device_fingerprint=device.fingerprint,
            source_address=source_address,
            user_agent=device.user_agent,
        )
        return result

    # -------------------------------------------------------------------------
    # Telemetry
    # -------------------------------------------------------------------------

    def log_event(self, event: EventInput, source_address: str) -> EventRecord:
        """Append a single behavioral event."""
        return self.events.record_one(
            session_id=event.session_id,
            event_type=event.event_type,
            event_data=event.event_data,
            device_info=event.device_info,
            source_address=source_address,
            timestamp=event.timestamp,
        )

    def log_batch(
        self, events: Optional[Sequence[Any]], source_address: str
    ) -> Tuple[int, int]:
        """Append a batch of raw events.

        Raises:
            ValidationError: If no events were provided
        """
        if not events:
            raise ValidationError("No events provided")
        return self.events.record_batch(events, source_address)

    # -------------------------------------------------------------------------
    # Analytics
    # -------------------------------------------------------------------------

    def login_stats(self, time_range: Optional[str] = None) -> Dict[str, StatsBucket]:
        return self.attempts.stats(TimeRange.parse(time_range))

    def ip_reputation(self, address: str) -> ReputationRecord:
        """Reputation record for an address.

        Raises:
            NotFoundError: If the address was never observed
        """
        record = self.reputation.lookup(address)
        if record is None:
            raise NotFoundError("IP not found", resource="ip_reputation",
                                details={"address": address})
        return record

    def ip_info(self, address: str) -> Location:
        return self.geolocator.geolocate(address)

    def export_all(self) -> Dict[str, List[Dict[str, Any]]]:
        """Dump every collection (research/debug use)."""
        return {
            Collections.EVENT_LOGS: [r.model_dump(mode="json") for r in self.events.all()],
            Collections.LOGIN_ATTEMPTS: [r.model_dump(mode="json") for r in self.attempts.all()],
            Collections.IP_REPUTATION: [r.model_dump(mode="json") for r in self.reputation.all()],
            Collections.SESSIONS: [r.model_dump(mode="json") for r in self.sessions.all()],
        }
