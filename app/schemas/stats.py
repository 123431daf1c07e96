from pydantic import BaseModel
from typing import List
from decimal import Decimal

from app.schemas.commission import Commission

class ServiceTypeBreakdown(BaseModel):
    service_type: str
    total_amount: Decimal
    count: int

class CommissionStats(BaseModel):
    user_id: int
    total_earned: Decimal
    pending_amount: Decimal
    paid_amount: Decimal
    commission_count: int
    recent_commissions: List[Commission] = []
    commissions_by_service_type: List[ServiceTypeBreakdown] = []
