from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from app.crud import crud_commission, crud_commission_issue
from app.schemas.commission import (
    Commission as CommissionSchema,
    CommissionRunResult,
    MarkPaidRequest,
    MarkPaidResponse,
)
from app.schemas.commission_issue import CommissionIssue as CommissionIssueSchema
from app.schemas.transaction import CompletedTransaction
from app.core.commissions_calculator import calculate_and_record_commissions, retry_commission_issue
from app.core.constants import ISSUE_STATUS_OPEN
from app.db.session import get_db
from app.core.dependencies import get_current_active_admin
from app.models.user import User

router = APIRouter()

@router.post("/transactions", response_model=CommissionRunResult)
async def process_completed_transaction(
    transaction_in: CompletedTransaction,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_admin)
):
    """
    Record commissions for a completed transaction.
    Always answers 200: commission failures are queued as issues and reported as "deferred".
    """
    return await calculate_and_record_commissions(db, transaction_in)

@router.get("/pending", response_model=List[CommissionSchema])
async def read_pending_commissions(
    db: Session = Depends(get_db),
    user_id: Optional[int] = Query(None),
    service_type: Optional[str] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=200),
    current_user: User = Depends(get_current_active_admin)
):
    return crud_commission.list_pending_commissions(
        db, user_id=user_id, service_type=service_type, skip=skip, limit=limit
    )

@router.get("/by-transaction/{transaction_id}", response_model=List[CommissionSchema])
async def read_commissions_by_transaction(
    transaction_id: int,
    service_type: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_admin)
):
    return crud_commission.get_commissions_by_transaction(db, transaction_id=transaction_id, service_type=service_type)

@router.post("/mark-paid", response_model=MarkPaidResponse)
async def mark_commissions_paid(
    payload: MarkPaidRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_admin)
):
    """
    Mark pending commissions as paid. Ids that are unknown or already paid are skipped;
    `updated` is the number of entries actually transitioned.
    """
    updated = crud_commission.mark_commissions_paid(db, commission_ids=payload.commission_ids)
    return MarkPaidResponse(requested=len(set(payload.commission_ids)), updated=updated)

@router.get("/issues", response_model=List[CommissionIssueSchema])
async def read_commission_issues(
    db: Session = Depends(get_db),
    status: Optional[str] = Query(ISSUE_STATUS_OPEN),
    error_kind: Optional[str] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=200),
    current_user: User = Depends(get_current_active_admin)
):
    """
    Operator queue: transactions whose commissions are deferred.
    """
    return crud_commission_issue.list_issues(db, status=status, error_kind=error_kind, skip=skip, limit=limit)

@router.post("/issues/{issue_id}/retry", response_model=CommissionRunResult)
async def retry_issue(
    issue_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_admin)
):
    result = await retry_commission_issue(db, issue_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Commission issue not found")
    return result

@router.get("/{commission_id}", response_model=CommissionSchema)
async def read_commission(
    commission_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_admin)
):
    db_commission = crud_commission.get_commission(db, commission_id=commission_id)
    if not db_commission:
        raise HTTPException(status_code=404, detail="Commission not found")
    return db_commission
