"""Reputation schema - per source address trust record."""

from datetime import datetime
from pydantic import BaseModel, Field, model_validator

from intellisoc.common.constants import ReputationConstants


class ReputationRecord(BaseModel):
    """Trust record keyed by source address.

    Invariants:
        total_logins == failed_logins + successful_logins
        0 <= reputation_score <= 100
        first_seen <= last_seen
    """
    address: str = Field(..., description="Source address this record tracks")
    reputation_score: int = Field(
        ...,
        ge=ReputationConstants.SCORE_MIN,
        le=ReputationConstants.SCORE_MAX,
    )
    total_logins: int = Field(default=0, ge=0)
    failed_logins: int = Field(default=0, ge=0)
    successful_logins: int = Field(default=0, ge=0)
    suspicious_activities: int = Field(default=0, ge=0)
    first_seen: datetime = Field(...)
    last_seen: datetime = Field(...)
    is_blocked: bool = Field(default=False)

    @model_validator(mode="after")
    def _check_invariants(self) -> "ReputationRecord":
        if self.total_logins != self.failed_logins + self.successful_logins:
            raise ValueError(
                "total_logins must equal failed_logins + successful_logins"
            )
        if self.first_seen > self.last_seen:
            raise ValueError("first_seen must not be after last_seen")
        return self
