import logging
from datetime import date
from decimal import Decimal
from typing import Optional, List

from sqlalchemy.orm import Session

from app.models.commission_config import CommissionConfig
from app.schemas.commission_config import (
    CommissionConfigCreate,
    CommissionConfigUpdate,
    validate_commission_split,
    validate_validity_window,
)
from app.core.constants import TIER_PERCENTAGE_FIELDS, DEFAULT_SERVICE_TYPES, DEFAULT_COMMISSION_RATES
from app.core.exceptions import ConfigurationMissing, ConfigurationAmbiguous

logger = logging.getLogger(__name__)

NOT_NULL_FIELDS = set(TIER_PERCENTAGE_FIELDS.values()) | {"is_peak_rate", "is_active"}

def create_commission_config(db: Session, *, obj_in: CommissionConfigCreate) -> CommissionConfig:
    """
    Create a commission config. The schema has already validated the split;
    total_commission is always stored as the sum of the tier percentages.
    """
    data = obj_in.model_dump()
    data["total_commission"] = sum(obj_in.percentages().values(), Decimal("0"))
    db_obj = CommissionConfig(**data)
    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)
    logger.info(f"Created commission config ID: {db_obj.id} for service type '{db_obj.service_type}', provider: {db_obj.provider or 'ALL'}, total: {db_obj.total_commission}%")
    return db_obj

def get_commission_config(db: Session, config_id: int) -> Optional[CommissionConfig]:
    return db.query(CommissionConfig).filter(CommissionConfig.id == config_id).first()

def list_commission_configs(
    db: Session, *, service_type: Optional[str] = None, include_inactive: bool = False, skip: int = 0, limit: int = 100
) -> List[CommissionConfig]:
    """
    List configs, most recently updated first.
    """
    query = db.query(CommissionConfig)
    if service_type:
        query = query.filter(CommissionConfig.service_type == service_type.strip().lower())
    if not include_inactive:
        query = query.filter(CommissionConfig.is_active == True)
    return query.order_by(CommissionConfig.updated_at.desc(), CommissionConfig.id.desc()).offset(skip).limit(limit).all()

def update_commission_config(db: Session, *, db_obj: CommissionConfig, obj_in: CommissionConfigUpdate) -> CommissionConfig:
    """
    Apply a partial update. The merged percentages and window are validated before
    anything is written, and the cached total is recomputed.
    Raises InvalidCommissionConfig.
    """
    update_data = obj_in.model_dump(exclude_unset=True)

    merged_percentages = {
        tier: Decimal(update_data[field]) if update_data.get(field) is not None else Decimal(getattr(db_obj, field))
        for tier, field in TIER_PERCENTAGE_FIELDS.items()
    }
    total = validate_commission_split(merged_percentages)
    validate_validity_window(
        update_data.get("start_date", db_obj.start_date),
        update_data.get("end_date", db_obj.end_date),
        update_data["is_peak_rate"] if update_data.get("is_peak_rate") is not None else db_obj.is_peak_rate,
    )

    for field, value in update_data.items():
        if value is None and field in NOT_NULL_FIELDS:
            continue # None means "unchanged" for NOT NULL columns
        if field == "provider" and value is not None:
            value = value.strip() or None
        setattr(db_obj, field, value)
    db_obj.total_commission = total

    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)
    logger.info(f"Updated commission config ID: {db_obj.id}, total: {db_obj.total_commission}%, active: {db_obj.is_active}")
    return db_obj

def deactivate_commission_config(db: Session, *, config_id: int) -> Optional[CommissionConfig]:
    """
    Soft-deactivate a config. Configs are never deleted so ledger entries keep their reference.
    Returns the config whether it was active or already inactive, None if not found.
    """
    db_obj = get_commission_config(db, config_id)
    if db_obj:
        if db_obj.is_active:
            db_obj.is_active = False
            db.add(db_obj)
            db.commit()
            db.refresh(db_obj)
            logger.info(f"Deactivated commission config ID: {config_id}")
        return db_obj
    return None

def resolve_commission_config(
    db: Session, *, service_type: str, provider: Optional[str] = None, transaction_date: date, strict: bool = False
) -> CommissionConfig:
    """
    Select the single config that applies to a transaction.

    Most specific wins: an exact provider match beats the wildcard (provider NULL),
    then a peak rate config whose window contains the date beats the standing config.
    Remaining ties go to the most recently created config with a warning, or raise
    ConfigurationAmbiguous when strict is set.

    Raises ConfigurationMissing when nothing applies.
    """
    service_type = service_type.strip().lower()
    active = (
        db.query(CommissionConfig)
        .filter(CommissionConfig.service_type == service_type, CommissionConfig.is_active == True)
        .all()
    )
    if not active:
        raise ConfigurationMissing(service_type, provider)

    in_window = [c for c in active if c.applies_on(transaction_date)]

    exact = [c for c in in_window if provider and c.provider == provider]
    candidates = exact or [c for c in in_window if c.provider is None]
    if not candidates:
        raise ConfigurationMissing(service_type, provider)

    peak = [c for c in candidates if c.is_peak_rate]
    if peak:
        candidates = peak

    candidates.sort(key=lambda c: (c.created_at, c.id), reverse=True)
    if len(candidates) > 1:
        tied_ids = [c.id for c in candidates]
        if strict:
            raise ConfigurationAmbiguous(service_type, tied_ids)
        logger.warning(f"Commission configs {tied_ids} are equally specific for service type '{service_type}', provider: {provider or 'ALL'} on {transaction_date}. Using most recently created config ID: {candidates[0].id}")

    selected = candidates[0]
    logger.debug(f"Resolved commission config ID: {selected.id} for service type '{service_type}', provider: {provider or 'ALL'} on {transaction_date}")
    return selected

def ensure_default_commission_configs(db: Session) -> List[CommissionConfig]:
    """
    Create a standing wildcard config with the default rates for every primary service type
    that has no active config yet. Returns the configs created.
    """
    created = []
    for service_type in DEFAULT_SERVICE_TYPES:
        existing = (
            db.query(CommissionConfig)
            .filter(CommissionConfig.service_type == service_type, CommissionConfig.is_active == True)
            .first()
        )
        if existing:
            continue
        logger.info(f"Creating default commission config for service type: {service_type}")
        created.append(create_commission_config(db, obj_in=CommissionConfigCreate(
            service_type=service_type,
            admin_commission=DEFAULT_COMMISSION_RATES["admin"],
            branch_manager_commission=DEFAULT_COMMISSION_RATES["branch_manager"],
            taluk_manager_commission=DEFAULT_COMMISSION_RATES["taluk_manager"],
            service_agent_commission=DEFAULT_COMMISSION_RATES["service_agent"],
            registered_user_commission=DEFAULT_COMMISSION_RATES["registered_user"],
        )))
    return created
