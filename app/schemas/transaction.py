from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime, timezone
from decimal import Decimal

class CompletedTransaction(BaseModel):
    """
    A transaction reported as completed by the host application.

    `amount` is not bounded here: a non-positive amount is rejected by the calculator
    and queued for an operator. Sub-cent amounts are rounded half-up to cents before
    any share is computed.
    """
    id: int
    user_id: int # Customer who made the transaction
    service_type: str = Field(..., min_length=1, max_length=50)
    provider: Optional[str] = Field(default=None, max_length=100)
    amount: Decimal
    completed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    service_agent_id: Optional[int] = None # Agent who processed it; starting point of the hierarchy walk
    service_id: Optional[int] = None # Defaults to id

    @field_validator("service_type")
    @classmethod
    def normalize_service_type(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("provider")
    @classmethod
    def blank_provider_is_wildcard(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    @property
    def effective_service_id(self) -> int:
        return self.service_id if self.service_id is not None else self.id
