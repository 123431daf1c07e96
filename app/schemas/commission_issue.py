from pydantic import BaseModel
from typing import Optional, Any
from datetime import datetime

class CommissionIssue(BaseModel):
    id: int
    service_type: str
    transaction_id: int
    error_kind: str
    detail: Optional[str] = None
    transaction_payload: Any
    retryable: bool
    status: str
    attempts: int
    created_at: datetime
    updated_at: datetime
    resolved_at: Optional[datetime] = None

    class Config:
        from_attributes = True
