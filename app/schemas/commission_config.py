from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from app.core import config as settings
from app.core.constants import TIER_PERCENTAGE_FIELDS, DEFAULT_COMMISSION_RATES, ADMIN, BRANCH_MANAGER, TALUK_MANAGER, SERVICE_AGENT, REGISTERED_USER
from app.core.exceptions import InvalidCommissionConfig


def validate_commission_split(percentages: Dict[str, Decimal]) -> Decimal:
    """
    Check a tier -> percentage mapping against the platform bounds and return its total.

    Each tier must be within 0..COMMISSION_MAX_TIER_PERCENTAGE and the total must not
    exceed COMMISSION_MAX_TOTAL_PERCENTAGE.
    """
    for tier, value in percentages.items():
        if value < 0 or value > settings.COMMISSION_MAX_TIER_PERCENTAGE:
            raise InvalidCommissionConfig(
                f"{tier} commission must be between 0% and {settings.COMMISSION_MAX_TIER_PERCENTAGE}%, got {value}%"
            )
    total = sum(percentages.values(), Decimal("0"))
    if total > settings.COMMISSION_MAX_TOTAL_PERCENTAGE:
        raise InvalidCommissionConfig(
            f"Total commission {total}% exceeds the platform ceiling of {settings.COMMISSION_MAX_TOTAL_PERCENTAGE}%"
        )
    return total


def validate_validity_window(start_date: Optional[date], end_date: Optional[date], is_peak_rate: bool) -> None:
    if start_date and end_date and start_date > end_date:
        raise InvalidCommissionConfig(f"start_date {start_date} is after end_date {end_date}")
    if is_peak_rate and start_date is None and end_date is None:
        raise InvalidCommissionConfig("A peak rate config needs a validity window (start_date and/or end_date)")


class CommissionConfigBase(BaseModel):
    service_type: str = Field(..., min_length=1, max_length=50)
    provider: Optional[str] = Field(default=None, max_length=100)
    admin_commission: Decimal = Field(default=DEFAULT_COMMISSION_RATES[ADMIN], ge=0, decimal_places=2)
    branch_manager_commission: Decimal = Field(default=DEFAULT_COMMISSION_RATES[BRANCH_MANAGER], ge=0, decimal_places=2)
    taluk_manager_commission: Decimal = Field(default=DEFAULT_COMMISSION_RATES[TALUK_MANAGER], ge=0, decimal_places=2)
    service_agent_commission: Decimal = Field(default=DEFAULT_COMMISSION_RATES[SERVICE_AGENT], ge=0, decimal_places=2)
    registered_user_commission: Decimal = Field(default=DEFAULT_COMMISSION_RATES[REGISTERED_USER], ge=0, decimal_places=2)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_peak_rate: bool = False
    season_name: Optional[str] = Field(default=None, max_length=100)
    is_active: bool = True

    @field_validator("service_type")
    @classmethod
    def normalize_service_type(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("provider")
    @classmethod
    def blank_provider_is_wildcard(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    def percentages(self) -> Dict[str, Decimal]:
        return {tier: getattr(self, field) for tier, field in TIER_PERCENTAGE_FIELDS.items()}

class CommissionConfigCreate(CommissionConfigBase):
    total_commission: Optional[Decimal] = None # Optional; must match the sum when given

    @model_validator(mode="after")
    def check_split(self):
        total = validate_commission_split(self.percentages())
        if self.total_commission is not None and self.total_commission != total:
            raise InvalidCommissionConfig(
                f"total_commission {self.total_commission}% does not match the sum of tier percentages ({total}%)"
            )
        validate_validity_window(self.start_date, self.end_date, self.is_peak_rate)
        return self

class CommissionConfigUpdate(BaseModel):
    """Partial update. The merged result is re-validated by the store."""
    provider: Optional[str] = Field(default=None, max_length=100)
    admin_commission: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    branch_manager_commission: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    taluk_manager_commission: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    service_agent_commission: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    registered_user_commission: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_peak_rate: Optional[bool] = None
    season_name: Optional[str] = Field(default=None, max_length=100)
    is_active: Optional[bool] = None

class CommissionConfig(CommissionConfigBase):
    id: int
    total_commission: Decimal
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
