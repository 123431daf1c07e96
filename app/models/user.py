from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from app.db.base_class import Base
from app.core.constants import ADMIN

class User(Base):
    __tablename__ = "user"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=True)
    hashed_password = Column(String, nullable=True)
    user_type = Column(String(50), nullable=False, index=True) # admin, branch_manager, taluk_manager, service_agent, registered_user
    parent_id = Column(Integer, ForeignKey("user.id"), nullable=True, index=True) # One level up the management hierarchy
    is_active = Column(Boolean, default=True, nullable=False)
    is_superuser = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    # Self-referential relationship for the management hierarchy
    parent = relationship("User", remote_side=[id], back_populates="children")
    children = relationship("User", back_populates="parent")

    @property
    def is_admin(self) -> bool:
        return self.is_superuser or self.user_type == ADMIN

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}', type='{self.user_type}', parent_id={self.parent_id})>"
