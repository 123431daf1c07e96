from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, JSON
from sqlalchemy.sql import func
from app.db.base_class import Base
from app.core.constants import ISSUE_STATUS_OPEN

class CommissionIssue(Base):
    """A transaction whose commissions could not be recorded, waiting for an operator."""
    __tablename__ = "commission_issue"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    service_type = Column(String(50), nullable=False, index=True)
    transaction_id = Column(Integer, nullable=False, index=True)

    error_kind = Column(String(50), nullable=False, index=True) # ConfigurationMissing, HierarchyMalformed, InvalidAmount, PartialFailure
    detail = Column(Text, nullable=True)
    transaction_payload = Column(JSON, nullable=False) # CompletedTransaction snapshot, replayed on retry
    retryable = Column(Boolean, default=False, nullable=False)

    status = Column(String(20), nullable=False, default=ISSUE_STATUS_OPEN, index=True) # open, resolved
    attempts = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)
    resolved_at = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<CommissionIssue(id={self.id}, transaction_id={self.transaction_id}, kind='{self.error_kind}', status='{self.status}')>"
