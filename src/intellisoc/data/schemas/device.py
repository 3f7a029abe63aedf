"""DeviceInfo schema - the client instrumentation envelope."""

from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field


class DeviceInfo(BaseModel):
    """Device envelope produced by the browser instrumentation.

    Only the fields the ledger persists are modelled; anything else the
    client sends is kept but ignored.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    fingerprint: Optional[str] = Field(default=None)
    browser: Dict[str, Any] = Field(default_factory=dict)
    screen: Dict[str, Any] = Field(default_factory=dict)
    timezone: Dict[str, Any] = Field(default_factory=dict)
    referrer: Optional[str] = Field(default=None)
    current_url: Optional[str] = Field(default=None, alias="currentUrl")

    @property
    def user_agent(self) -> Optional[str]:
        """User agent string reported by the browser block, if any."""
        value = self.browser.get("userAgent")
        return value if isinstance(value, str) else None
