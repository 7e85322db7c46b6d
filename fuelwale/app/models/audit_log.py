"""
Audit Log Database Model.

Tracks authentication events, admin actions and trip lifecycle transitions.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from fuelwale.app.db.session import Base


class AuditLog(Base):
    """
    Audit log model.

    Events logged include:
    - LOGIN_SUCCESS / LOGIN_FAILED / TOKEN_REVOKED
    - USER_CREATED / USER_DELETED / ROLE_CHANGED
    - TRIP_ASSIGNED / TRIP_STARTED / TRIP_COMPLETED
    - LOADING_RECORDED / DELIVERY_RECORDED
    """
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Who performed the action (None for system actions)
    actor_id = Column(Integer, index=True, nullable=True)
    actor_username = Column(String(100), nullable=True)

    action = Column(String(100), nullable=False, index=True)

    # What was acted upon
    entity_type = Column(String(50), nullable=True)
    entity_id = Column(Integer, index=True, nullable=True)

    meta_data = Column(JSON, nullable=True)

    ip_address = Column(String(50), nullable=True)

    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', actor={self.actor_username})>"
