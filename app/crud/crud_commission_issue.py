from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import Optional, List

from app.models.commission_issue import CommissionIssue
from app.schemas.transaction import CompletedTransaction
from app.core.constants import ISSUE_STATUS_OPEN, ISSUE_STATUS_RESOLVED
from app.core.exceptions import CommissionError

def create_issue(db: Session, *, transaction: CompletedTransaction, error: CommissionError) -> CommissionIssue:
    """
    Queue a transaction whose commissions could not be recorded.
    If an open issue already exists for the same transaction it is updated instead.
    """
    db_obj = get_open_issue_for_transaction(db, service_type=transaction.service_type, transaction_id=transaction.id)
    if db_obj:
        return record_attempt(db, db_obj=db_obj, error=error)

    db_obj = CommissionIssue(
        service_type=transaction.service_type,
        transaction_id=transaction.id,
        error_kind=error.kind,
        detail=error.message,
        transaction_payload=transaction.model_dump(mode="json"),
        retryable=error.retryable,
        status=ISSUE_STATUS_OPEN,
        attempts=1,
    )
    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)
    return db_obj

def get_issue(db: Session, issue_id: int) -> Optional[CommissionIssue]:
    return db.query(CommissionIssue).filter(CommissionIssue.id == issue_id).first()

def get_open_issue_for_transaction(db: Session, *, service_type: str, transaction_id: int) -> Optional[CommissionIssue]:
    return (
        db.query(CommissionIssue)
        .filter(
            CommissionIssue.service_type == service_type,
            CommissionIssue.transaction_id == transaction_id,
            CommissionIssue.status == ISSUE_STATUS_OPEN
        )
        .first()
    )

def list_issues(
    db: Session, *, status: Optional[str] = ISSUE_STATUS_OPEN, error_kind: Optional[str] = None, skip: int = 0, limit: int = 100
) -> List[CommissionIssue]:
    query = db.query(CommissionIssue)
    if status:
        query = query.filter(CommissionIssue.status == status)
    if error_kind:
        query = query.filter(CommissionIssue.error_kind == error_kind)
    return query.order_by(CommissionIssue.created_at.asc(), CommissionIssue.id.asc()).offset(skip).limit(limit).all()

def record_attempt(db: Session, *, db_obj: CommissionIssue, error: CommissionError) -> CommissionIssue:
    db_obj.attempts += 1
    db_obj.error_kind = error.kind
    db_obj.detail = error.message
    db_obj.retryable = error.retryable
    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)
    return db_obj

def mark_resolved(db: Session, *, db_obj: CommissionIssue) -> CommissionIssue:
    db_obj.status = ISSUE_STATUS_RESOLVED
    db_obj.resolved_at = func.now()
    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)
    return db_obj
