from datetime import date
from decimal import Decimal
from typing import Dict

from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, Numeric, Index
from sqlalchemy.sql import func
from app.db.base_class import Base
from app.core.constants import TIER_PERCENTAGE_FIELDS

class CommissionConfig(Base):
    __tablename__ = "commission_config"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    service_type = Column(String(50), nullable=False, index=True) # recharge, booking, taxi, ...
    provider = Column(String(100), nullable=True) # NULL applies to every provider of the service type

    # Percentages of the transaction amount, per tier
    admin_commission = Column(Numeric(5, 2), nullable=False, default=Decimal("0.5"))
    branch_manager_commission = Column(Numeric(5, 2), nullable=False, default=Decimal("0.5"))
    taluk_manager_commission = Column(Numeric(5, 2), nullable=False, default=Decimal("1.0"))
    service_agent_commission = Column(Numeric(5, 2), nullable=False, default=Decimal("3.0"))
    registered_user_commission = Column(Numeric(5, 2), nullable=False, default=Decimal("1.0"))
    total_commission = Column(Numeric(5, 2), nullable=False, default=Decimal("6.0")) # Sum of the five above

    # Seasonal / peak pricing
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    is_peak_rate = Column(Boolean, default=False, nullable=False)
    season_name = Column(String(100), nullable=True) # e.g. "Diwali 2023"

    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_commission_config_lookup", "service_type", "provider", "is_active"),
    )

    @property
    def percentages(self) -> Dict[str, Decimal]:
        return {tier: Decimal(getattr(self, field) or 0) for tier, field in TIER_PERCENTAGE_FIELDS.items()}

    @property
    def has_window(self) -> bool:
        return self.start_date is not None or self.end_date is not None

    def applies_on(self, on_date: date) -> bool:
        """True when on_date falls inside the validity window (inclusive); always true without a window."""
        if self.start_date is not None and on_date < self.start_date:
            return False
        if self.end_date is not None and on_date > self.end_date:
            return False
        return True

    def __repr__(self):
        return f"<CommissionConfig(id={self.id}, service_type='{self.service_type}', provider={self.provider!r}, total={self.total_commission}, peak={self.is_peak_rate})>"
