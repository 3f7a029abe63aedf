"""LoginAttempt schema - canonical definition."""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class AttemptStatus(str, Enum):
    """Outcome of a login attempt."""
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


class FailureReason(str, Enum):
    """Why a login attempt failed."""
    USER_NOT_FOUND = "user_not_found"
    INVALID_PASSWORD = "invalid_password"
    ADDRESS_BLOCKED = "address_blocked"


class LoginAttempt(BaseModel):
    """Login attempt record. Immutable once appended."""
    attempt_id: int = Field(..., ge=1, description="Per-ledger sequence number")
    timestamp: datetime = Field(..., description="When the attempt was recorded")
    username: str = Field(..., description="Username as submitted")
    user_id: Optional[str] = Field(default=None, description="Resolved user, if known")
    session_id: Optional[str] = Field(default=None)
    source_address: str = Field(...)
    device_fingerprint: Optional[str] = Field(default=None)
    user_agent: Optional[str] = Field(default=None)
    secret_length: int = Field(..., ge=0)
    remember_me: bool = Field(default=False)
    attempt_status: AttemptStatus = Field(...)
    failure_reason: Optional[FailureReason] = Field(default=None)

    model_config = {"frozen": True}
