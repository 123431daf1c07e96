import uuid
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from app.crud import crud_user, crud_commission_config
from app.schemas.user import UserCreate
from app.schemas.commission_config import CommissionConfigCreate
from app.models.user import User as UserModel
from app.models.commission_config import CommissionConfig as CommissionConfigModel


def create_hierarchy_user(
    db: Session,
    user_type: str,
    parent: Optional[UserModel] = None,
    *,
    is_active: bool = True,
    password: Optional[str] = None,
    is_superuser: bool = False,
) -> UserModel:
    suffix = uuid.uuid4().hex[:6]
    return crud_user.create_user(db, obj_in=UserCreate(
        username=f"{user_type}_{suffix}",
        email=f"{user_type}_{suffix}@example.com",
        user_type=user_type,
        parent_id=parent.id if parent else None,
        is_active=is_active,
        password=password,
        is_superuser=is_superuser,
    ))

def create_config(db: Session, **overrides) -> CommissionConfigModel:
    """Recharge config with the standard 0.5 / 0.5 / 1.0 / 3.0 / 1.0 split unless overridden."""
    data = dict(
        service_type="recharge",
        admin_commission=Decimal("0.5"),
        branch_manager_commission=Decimal("0.5"),
        taluk_manager_commission=Decimal("1.0"),
        service_agent_commission=Decimal("3.0"),
        registered_user_commission=Decimal("1.0"),
    )
    data.update(overrides)
    return crud_commission_config.create_commission_config(db, obj_in=CommissionConfigCreate(**data))
