import logging
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload
from typing import Optional, List, Iterable

from app.models.commission import Commission
from app.schemas.commission import CommissionCreate
from app.core.constants import COMMISSION_STATUS_PENDING, COMMISSION_STATUS_PAID
from app.core.exceptions import PartialFailure

logger = logging.getLogger(__name__)

def record_commissions(db: Session, *, commissions: List[CommissionCreate]) -> List[Commission]:
    """
    Write the ledger entries of one transaction in a single database transaction.
    Either every entry is persisted or none is: on any database error the batch is
    rolled back and PartialFailure (retryable) is raised.
    """
    if not commissions:
        return []

    transaction_id = commissions[0].transaction_id
    db_objs = []
    try:
        for obj_in in commissions:
            db_obj = Commission(**obj_in.model_dump())
            db.add(db_obj)
            db.flush() # Surface constraint violations entry by entry, inside the open transaction
            db_objs.append(db_obj)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Recording commissions for transaction ID: {transaction_id} failed after {len(db_objs)} of {len(commissions)} entries. Batch rolled back: {exc}")
        raise PartialFailure(
            f"Commission batch for transaction {transaction_id} failed after {len(db_objs)} of {len(commissions)} entries and was rolled back",
            transaction_id=transaction_id,
        ) from exc

    for db_obj in db_objs:
        db.refresh(db_obj)
    logger.info(f"Recorded {len(db_objs)} commission entries for transaction ID: {transaction_id}")
    return db_objs

def mark_commissions_paid(db: Session, *, commission_ids: Iterable[int]) -> int:
    """
    Transition pending entries to paid. Unknown ids and entries that are already paid
    are left alone. The update only matches rows still pending, so concurrent calls
    never transition the same entry twice.
    Returns the number of entries actually transitioned.
    """
    ids = set(commission_ids)
    if not ids:
        return 0

    updated = (
        db.query(Commission)
        .filter(Commission.id.in_(ids), Commission.status == COMMISSION_STATUS_PENDING)
        .update(
            {Commission.status: COMMISSION_STATUS_PAID, Commission.paid_at: func.now()},
            synchronize_session=False,
        )
    )
    db.commit()
    logger.info(f"Marked {updated} of {len(ids)} requested commissions as paid")
    return updated

def get_commission(db: Session, commission_id: int) -> Optional[Commission]:
    """
    Get a single ledger entry by ID with its recipient eagerly loaded.
    """
    return (
        db.query(Commission)
        .options(joinedload(Commission.recipient))
        .filter(Commission.id == commission_id)
        .first()
    )

def list_pending_commissions(
    db: Session, *, user_id: Optional[int] = None, service_type: Optional[str] = None, skip: int = 0, limit: int = 100
) -> List[Commission]:
    """
    Pending entries, oldest first so older ones are paid out first.
    """
    query = (
        db.query(Commission)
        .options(joinedload(Commission.recipient))
        .filter(Commission.status == COMMISSION_STATUS_PENDING)
    )
    if user_id is not None:
        query = query.filter(Commission.user_id == user_id)
    if service_type:
        query = query.filter(Commission.service_type == service_type)
    return query.order_by(Commission.created_at.asc(), Commission.id.asc()).offset(skip).limit(limit).all()

def get_commissions_by_user(
    db: Session, *, user_id: int, status: Optional[str] = None, skip: int = 0, limit: int = 100
) -> List[Commission]:
    """
    Entries earned by a user, newest first, optionally filtered by status.
    """
    query = db.query(Commission).filter(Commission.user_id == user_id)
    if status:
        query = query.filter(Commission.status == status)
    return query.order_by(Commission.created_at.desc(), Commission.id.desc()).offset(skip).limit(limit).all()

def get_commissions_by_transaction(
    db: Session, *, transaction_id: int, service_type: Optional[str] = None
) -> List[Commission]:
    """
    All entries generated by one transaction.
    """
    query = (
        db.query(Commission)
        .options(joinedload(Commission.recipient))
        .filter(Commission.transaction_id == transaction_id)
    )
    if service_type:
        query = query.filter(Commission.service_type == service_type)
    return query.order_by(Commission.id.asc()).all()
