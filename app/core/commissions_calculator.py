import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from sqlalchemy.orm import Session

from app.crud import crud_commission, crud_commission_config, crud_commission_issue
from app.core.hierarchy import resolve_participants
from app.core.constants import TWOPLACES, COMMISSION_STATUS_PENDING
from app.core.exceptions import CommissionError, InvalidAmount, HierarchyMalformed
from app.models.commission_config import CommissionConfig
from app.schemas.commission import CommissionCreate, CommissionShare, CommissionRunResult, Commission as CommissionSchema
from app.schemas.hierarchy import HierarchyParticipant
from app.schemas.transaction import CompletedTransaction

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")

def round_currency(value: Decimal) -> Decimal:
    """Round half-up to two decimal places."""
    return value.quantize(TWOPLACES, rounding=ROUND_HALF_UP)

def compute_commissions(
    transaction_amount, config: CommissionConfig, participants: List[HierarchyParticipant]
) -> List[CommissionShare]:
    """
    Split a transaction amount between the resolved participants.

    Each participant gets amount * tier percentage / 100, rounded half-up to cents.
    A tier with a percentage but no participant is forfeited: its share is neither
    redistributed nor refunded.
    """
    amount = Decimal(str(transaction_amount))
    if amount <= 0:
        raise InvalidAmount(amount)

    by_tier = {}
    for participant in participants:
        if participant.user_type in by_tier:
            raise HierarchyMalformed(f"Tier '{participant.user_type}' resolved to more than one participant", user_id=participant.user_id)
        by_tier[participant.user_type] = participant

    shares = []
    for tier, percentage in config.percentages.items():
        if percentage <= 0:
            continue
        participant = by_tier.get(tier)
        if participant is None:
            logger.info(f"No participant for tier '{tier}' under config ID: {config.id}. {percentage}% is forfeited.")
            continue
        commission_amount = round_currency(amount * percentage / HUNDRED)
        if commission_amount <= 0:
            logger.info(f"Tier '{tier}' share of {amount} at {percentage}% rounds to zero. Skipped.")
            continue
        shares.append(CommissionShare(
            user_type=tier,
            user_id=participant.user_id,
            commission_percentage=percentage,
            commission_amount=commission_amount,
        ))
    return shares

def forfeited_tiers(config: CommissionConfig, participants: List[HierarchyParticipant]) -> List[str]:
    present = {p.user_type for p in participants}
    return [tier for tier, percentage in config.percentages.items() if percentage > 0 and tier not in present]

def _record_transaction_commissions(db: Session, transaction: CompletedTransaction) -> CommissionRunResult:
    # Shares and the stored original amount come from the same cent-rounded value
    amount = round_currency(Decimal(transaction.amount))
    if amount <= 0:
        raise InvalidAmount(transaction.amount, transaction_id=transaction.id)

    config = crud_commission_config.resolve_commission_config(
        db,
        service_type=transaction.service_type,
        provider=transaction.provider,
        transaction_date=transaction.completed_at.date(),
    )
    logger.info(f"Transaction ID: {transaction.id} - using commission config ID: {config.id} (total {config.total_commission}%, peak: {config.is_peak_rate})")

    start_user_id = transaction.service_agent_id or transaction.user_id
    participants = resolve_participants(db, start_user_id, customer_id=transaction.user_id)

    shares = compute_commissions(amount, config, participants)
    forfeited = forfeited_tiers(config, participants)
    if forfeited:
        logger.warning(f"Transaction ID: {transaction.id} - tiers forfeited (not redistributed): {', '.join(forfeited)}")

    entries = [
        CommissionCreate(
            transaction_id=transaction.id,
            user_id=share.user_id,
            user_type=share.user_type,
            service_type=transaction.service_type,
            service_id=transaction.effective_service_id,
            provider=transaction.provider,
            commission_config_id=config.id,
            original_amount=amount,
            commission_percentage=share.commission_percentage,
            commission_amount=share.commission_amount,
            status=COMMISSION_STATUS_PENDING,
        )
        for share in shares
    ]
    commissions = crud_commission.record_commissions(db, commissions=entries)

    return CommissionRunResult(
        status="recorded",
        transaction_id=transaction.id,
        service_type=transaction.service_type,
        commission_config_id=config.id,
        commissions=[CommissionSchema.model_validate(c) for c in commissions],
        total_commission=sum((share.commission_amount for share in shares), Decimal("0.00")),
        forfeited_tiers=forfeited,
    )

async def calculate_and_record_commissions(db: Session, transaction: CompletedTransaction) -> CommissionRunResult:
    """
    Compute and record the commissions of a completed transaction.

    Commission failures never propagate to the caller: the host transaction has already
    succeeded for the customer. Each failure is logged, queued for an operator and
    reported as a "deferred" result.
    """
    logger.info(f"Starting commission calculation for {transaction.service_type} transaction ID: {transaction.id}, amount: {transaction.amount}, provider: {transaction.provider or 'N/A'}")

    existing = crud_commission.get_commissions_by_transaction(
        db, transaction_id=transaction.id, service_type=transaction.service_type
    )
    if existing:
        logger.warning(f"Commissions already recorded for {transaction.service_type} transaction ID: {transaction.id} ({len(existing)} entries). Not recording again.")
        return CommissionRunResult(
            status="already_recorded",
            transaction_id=transaction.id,
            service_type=transaction.service_type,
            commission_config_id=existing[0].commission_config_id,
            commissions=[CommissionSchema.model_validate(c) for c in existing],
            total_commission=sum((Decimal(c.commission_amount) for c in existing), Decimal("0.00")),
        )

    try:
        result = _record_transaction_commissions(db, transaction)
    except CommissionError as exc:
        if exc.transaction_id is None:
            exc.transaction_id = transaction.id
        logger.error(f"Commission calculation for {transaction.service_type} transaction ID: {transaction.id} failed with {exc.kind}: {exc.message}")
        issue = crud_commission_issue.create_issue(db, transaction=transaction, error=exc)
        logger.info(f"Transaction ID: {transaction.id} queued for operator review as issue ID: {issue.id} (retryable: {issue.retryable})")
        return CommissionRunResult(
            status="deferred",
            transaction_id=transaction.id,
            service_type=transaction.service_type,
            issue_id=issue.id,
            detail=f"{exc.kind}: {exc.message}",
        )

    logger.info(f"Commission calculation finished for transaction ID: {transaction.id}: {len(result.commissions)} entries, total {result.total_commission}")
    return result

async def retry_commission_issue(db: Session, issue_id: int) -> Optional[CommissionRunResult]:
    """
    Re-run a queued transaction. The issue is resolved when commissions end up recorded;
    otherwise its attempt count and detail are updated. Returns None for an unknown issue.
    """
    issue = crud_commission_issue.get_issue(db, issue_id)
    if issue is None:
        return None

    transaction = CompletedTransaction.model_validate(issue.transaction_payload)
    logger.info(f"Retrying commission issue ID: {issue.id} ({issue.error_kind}) for transaction ID: {transaction.id}, attempt {issue.attempts + 1}")
    result = await calculate_and_record_commissions(db, transaction)

    if result.status != "deferred":
        crud_commission_issue.mark_resolved(db, db_obj=issue)
        result.issue_id = issue.id
        logger.info(f"Commission issue ID: {issue.id} resolved")
    return result
