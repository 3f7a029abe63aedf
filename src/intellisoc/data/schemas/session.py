"""Session schema - canonical definition."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class Session(BaseModel):
    """Authenticated session record.

    ``session_id`` is the client-supplied correlation id and is not unique:
    a client may reuse it across logins, so the registry keeps every record.
    """
    session_id: Optional[str] = Field(default=None, description="Client-supplied correlation id")
    user_id: str = Field(..., description="Authenticated user identifier")
    session_token: str = Field(..., min_length=32, description="Opaque bearer token")
    device_fingerprint: Optional[str] = Field(default=None)
    source_address: str = Field(..., description="Client network address")
    user_agent: Optional[str] = Field(default=None)
    created_at: datetime = Field(..., description="Creation timestamp")
    expires_at: datetime = Field(..., description="Advisory expiry timestamp")
    is_active: bool = Field(default=True)

    model_config = {
        "json_schema_extra": {
            "example": {
                "session_id": "sess_abc123",
                "user_id": "1",
                "session_token": "9f2c...e41a",
                "device_fingerprint": "fp_7d1e",
                "source_address": "192.168.1.100",
                "user_agent": "Mozilla/5.0",
                "created_at": "2026-01-25T14:30:00Z",
                "expires_at": "2026-01-26T14:30:00Z",
                "is_active": True,
            }
        }
    }
