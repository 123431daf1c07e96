from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from app.crud import crud_commission_config
from app.schemas.commission_config import (
    CommissionConfigCreate,
    CommissionConfigUpdate,
    CommissionConfig as CommissionConfigSchema
)
from app.db.session import get_db
from app.core.dependencies import get_current_active_admin
from app.core.exceptions import ConfigurationMissing, ConfigurationAmbiguous, InvalidCommissionConfig
from app.models.user import User

router = APIRouter()

@router.post("/", response_model=CommissionConfigSchema, status_code=201)
def create_commission_config(
    config_in: CommissionConfigCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_admin)
):
    """
    Create a commission config. The split is validated against the platform bounds.
    """
    return crud_commission_config.create_commission_config(db=db, obj_in=config_in)

@router.get("/", response_model=List[CommissionConfigSchema])
def read_commission_configs(
    db: Session = Depends(get_db),
    service_type: Optional[str] = Query(None),
    include_inactive: bool = Query(False, description="Also list deactivated configs."),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=200),
    current_user: User = Depends(get_current_active_admin)
):
    return crud_commission_config.list_commission_configs(
        db, service_type=service_type, include_inactive=include_inactive, skip=skip, limit=limit
    )

@router.get("/resolve", response_model=CommissionConfigSchema)
def resolve_commission_config(
    service_type: str = Query(...),
    provider: Optional[str] = Query(None),
    on_date: Optional[date] = Query(None, description="Transaction date; defaults to today."),
    strict: bool = Query(False, description="Fail instead of picking the newest of equally specific configs."),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_admin)
):
    """
    Show which config a transaction with these attributes would use.
    """
    try:
        return crud_commission_config.resolve_commission_config(
            db, service_type=service_type, provider=provider, transaction_date=on_date or date.today(), strict=strict
        )
    except ConfigurationMissing as exc:
        raise HTTPException(status_code=404, detail=exc.message)
    except ConfigurationAmbiguous as exc:
        raise HTTPException(status_code=409, detail=exc.message)

@router.post("/initialize-defaults", response_model=List[CommissionConfigSchema])
def initialize_default_configs(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_admin)
):
    """
    Seed default configs for primary service types that have none. Returns the configs created.
    """
    return crud_commission_config.ensure_default_commission_configs(db)

@router.get("/{config_id}", response_model=CommissionConfigSchema)
def read_commission_config(
    config_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_admin)
):
    db_config = crud_commission_config.get_commission_config(db, config_id=config_id)
    if not db_config:
        raise HTTPException(status_code=404, detail="Commission config not found")
    return db_config

@router.put("/{config_id}", response_model=CommissionConfigSchema)
def update_commission_config(
    config_id: int,
    config_in: CommissionConfigUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_admin)
):
    db_config = crud_commission_config.get_commission_config(db, config_id=config_id)
    if not db_config:
        raise HTTPException(status_code=404, detail="Commission config not found")
    try:
        return crud_commission_config.update_commission_config(db=db, db_obj=db_config, obj_in=config_in)
    except InvalidCommissionConfig as exc:
        raise HTTPException(status_code=422, detail=str(exc))

@router.delete("/{config_id}", response_model=CommissionConfigSchema)
def deactivate_commission_config(
    config_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_admin)
):
    """
    Deactivate a config. Configs are never hard-deleted.
    """
    db_config = crud_commission_config.deactivate_commission_config(db=db, config_id=config_id)
    if not db_config:
        raise HTTPException(status_code=404, detail="Commission config not found")
    return db_config
