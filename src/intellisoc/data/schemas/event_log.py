"""EventRecord schema - behavioral telemetry captured from the client."""

from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field

from intellisoc.data.schemas.device import DeviceInfo


class EventRecord(BaseModel):
    """Behavioral event record. Immutable once appended."""
    log_id: int = Field(..., ge=1, description="Per-ledger sequence number")
    timestamp: datetime = Field(..., description="Client or server timestamp")
    session_id: str = Field(...)
    user_id: Optional[str] = Field(
        default=None, description="Resolved via session lookup; None if unknown"
    )
    event_type: str = Field(..., min_length=1)
    event_data: Dict[str, Any] = Field(default_factory=dict)
    source_address: str = Field(...)
    device_fingerprint: Optional[str] = Field(default=None)
    browser_info: Dict[str, Any] = Field(default_factory=dict)
    screen_info: Dict[str, Any] = Field(default_factory=dict)
    timezone_info: Dict[str, Any] = Field(default_factory=dict)
    referrer: Optional[str] = Field(default=None)
    current_url: Optional[str] = Field(default=None)

    model_config = {"frozen": True}


class EventInput(BaseModel):
    """One inbound event as sent by the client instrumentation."""
    model_config = ConfigDict(populate_by_name=True)

    timestamp: Optional[datetime] = Field(default=None)
    session_id: str = Field(..., min_length=1, alias="sessionId")
    event_type: str = Field(..., min_length=1, alias="eventType")
    event_data: Optional[Dict[str, Any]] = Field(default=None, alias="eventData")
    device_info: Optional[DeviceInfo] = Field(default=None, alias="deviceInfo")
