from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base_class import Base
from app.core.constants import COMMISSION_STATUS_PENDING

class Commission(Base):
    __tablename__ = "commission"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    transaction_id = Column(Integer, nullable=False, index=True) # Originating transaction, owned by the host application
    user_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True) # Recipient
    user_type = Column(String(50), nullable=False) # Tier the recipient was paid as

    service_type = Column(String(50), nullable=False, index=True)
    service_id = Column(Integer, nullable=False) # e.g. the recharge or booking id
    provider = Column(String(100), nullable=True)
    commission_config_id = Column(Integer, ForeignKey("commission_config.id"), nullable=True)

    original_amount = Column(Numeric(12, 2), nullable=False)
    commission_percentage = Column(Numeric(5, 2), nullable=False)
    commission_amount = Column(Numeric(12, 2), nullable=False)

    status = Column(String(20), nullable=False, default=COMMISSION_STATUS_PENDING, index=True) # pending, paid
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    paid_at = Column(DateTime, nullable=True)

    __table_args__ = (
        UniqueConstraint("service_type", "transaction_id", "user_type", name="uq_commission_transaction_tier"),
        CheckConstraint("commission_amount > 0", name="ck_commission_amount_positive"),
    )

    recipient = relationship("User", backref="commissions_earned")
    commission_config = relationship("CommissionConfig")

    def __repr__(self):
        return f"<Commission(id={self.id}, transaction_id={self.transaction_id}, user_id={self.user_id}, type='{self.user_type}', amount={self.commission_amount}, status='{self.status}')>"
