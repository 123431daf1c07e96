from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal

from app.core.constants import COMMISSION_STATUS_PENDING

class CommissionNestedUser(BaseModel):
    """A simplified User schema for nesting within Commission."""
    id: int
    username: str
    user_type: str

    class Config:
        from_attributes = True


class CommissionShare(BaseModel):
    """One participant's computed share of a transaction, not yet written to the ledger."""
    user_type: str
    user_id: int
    commission_percentage: Decimal
    commission_amount: Decimal


class CommissionBase(BaseModel):
    transaction_id: int
    user_id: int # Recipient
    user_type: str = Field(..., max_length=50)
    service_type: str = Field(..., max_length=50)
    service_id: int
    provider: Optional[str] = None
    commission_config_id: Optional[int] = None
    original_amount: Decimal
    commission_percentage: Decimal
    commission_amount: Decimal
    status: str = Field(default=COMMISSION_STATUS_PENDING, max_length=20)

class CommissionCreate(CommissionBase):
    """Schema for creating a ledger entry. Used internally by the commission engine."""
    pass

class Commission(CommissionBase):
    """Full schema for returning ledger entries to the client."""
    id: int
    created_at: datetime
    paid_at: Optional[datetime] = None

    recipient: Optional[CommissionNestedUser] = None

    class Config:
        from_attributes = True


class MarkPaidRequest(BaseModel):
    commission_ids: List[int] = Field(..., min_length=1)

class MarkPaidResponse(BaseModel):
    requested: int
    updated: int


class CommissionRunResult(BaseModel):
    """Outcome of processing one completed transaction."""
    status: str # recorded, already_recorded, deferred
    transaction_id: int
    service_type: str
    commission_config_id: Optional[int] = None
    commissions: List[Commission] = []
    total_commission: Decimal = Decimal("0.00")
    forfeited_tiers: List[str] = []
    issue_id: Optional[int] = None
    detail: Optional[str] = None
