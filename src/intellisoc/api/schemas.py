"""API Schemas - Request/Response models for the HTTP boundary.

Field names on the wire are camelCase, matching the browser
instrumentation; the ledger itself uses snake_case records.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

from intellisoc.common.timeutils import utcnow
from intellisoc.data.schemas.device import DeviceInfo
from intellisoc.data.schemas.event_log import EventInput


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class LoginRequest(BaseModel):
    """Request body for POST /api/auth/login.

    ``username`` and ``password`` are optional here so that missing
    credentials produce the API's own 400 message instead of a schema error.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "username": "admin",
                "password": "admin123",
                "sessionId": "sess_abc123",
                "rememberMe": False,
                "deviceInfo": {
                    "fingerprint": "fp_7d1e",
                    "browser": {"userAgent": "Mozilla/5.0"},
                },
            }
        },
    )

    username: Optional[str] = Field(default=None)
    password: Optional[str] = Field(default=None)
    device_info: Optional[DeviceInfo] = Field(default=None, alias="deviceInfo")
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    remember_me: Optional[bool] = Field(default=False, alias="rememberMe")


class LogEventRequest(EventInput):
    """Request body for POST /api/log/event."""
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "timestamp": "2026-01-25T14:30:05Z",
                "sessionId": "sess_abc123",
                "eventType": "mouse_movement",
                "eventData": {"x": 120, "y": 348},
                "deviceInfo": {"fingerprint": "fp_7d1e"},
            }
        },
    )


class LogBatchRequest(BaseModel):
    """Request body for POST /api/log/batch.

    Items are left unvalidated so that one malformed event cannot reject
    the whole batch.
    """
    events: Optional[List[Any]] = Field(default=None)


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class ApiResponse(BaseModel):
    """Standard response envelope."""
    status: Literal["success", "error"] = Field(...)
    message: Optional[str] = Field(default=None)
    data: Optional[Any] = Field(default=None)
    timestamp: datetime = Field(default_factory=utcnow)


class LoginSuccessData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId")
    username: str = Field(...)
    session_token: str = Field(..., alias="sessionToken")
    expires_at: datetime = Field(..., alias="expiresAt")
    session_id: Optional[str] = Field(default=None, alias="sessionId")


class LogEventData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    log_id: str = Field(..., alias="logId")
    event_type: str = Field(..., alias="eventType")
    timestamp: datetime = Field(...)


class LogBatchData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    events_logged: int = Field(..., ge=0, alias="eventsLogged")
    failed_events: int = Field(..., ge=0, alias="failedEvents")


class ErrorResponse(BaseModel):
    """Standard error response."""
    status: Literal["error"] = Field(default="error")
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Human-readable error message")
    data: Optional[Dict[str, Any]] = Field(default=None)
    request_id: Optional[str] = Field(
        default=None, description="Request ID for debugging"
    )
    timestamp: datetime = Field(default_factory=utcnow)
