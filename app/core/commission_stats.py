from decimal import Decimal
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.crud import crud_commission
from app.core.config import COMMISSION_RECENT_LIMIT
from app.core.constants import TWOPLACES, COMMISSION_STATUS_PENDING, COMMISSION_STATUS_PAID
from app.models.commission import Commission
from app.schemas.commission import Commission as CommissionSchema
from app.schemas.stats import CommissionStats, ServiceTypeBreakdown

def _money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(TWOPLACES)

def get_commission_stats(db: Session, user_id: int, *, recent_limit: Optional[int] = None) -> CommissionStats:
    """
    Summarize a user's ledger entries: totals by status, a per-service-type breakdown
    and the latest entries. Read-only; an empty ledger gives zeros and empty lists.
    """
    by_status = (
        db.query(Commission.status, func.count(Commission.id), func.sum(Commission.commission_amount))
        .filter(Commission.user_id == user_id)
        .group_by(Commission.status)
        .all()
    )
    totals = {status: _money(amount) for status, _, amount in by_status}
    commission_count = sum(count for _, count, _ in by_status)

    by_service_type = (
        db.query(Commission.service_type, func.sum(Commission.commission_amount), func.count(Commission.id))
        .filter(Commission.user_id == user_id)
        .group_by(Commission.service_type)
        .order_by(Commission.service_type)
        .all()
    )

    recent = crud_commission.get_commissions_by_user(
        db, user_id=user_id, limit=recent_limit if recent_limit is not None else COMMISSION_RECENT_LIMIT
    )

    return CommissionStats(
        user_id=user_id,
        total_earned=sum(totals.values(), Decimal("0.00")),
        pending_amount=totals.get(COMMISSION_STATUS_PENDING, Decimal("0.00")),
        paid_amount=totals.get(COMMISSION_STATUS_PAID, Decimal("0.00")),
        commission_count=commission_count,
        recent_commissions=[CommissionSchema.model_validate(c) for c in recent],
        commissions_by_service_type=[
            ServiceTypeBreakdown(service_type=service_type, total_amount=_money(amount), count=count)
            for service_type, amount, count in by_service_type
        ],
    )
