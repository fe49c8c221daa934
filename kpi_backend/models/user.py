"""KPI user model (externally owned, read-only here)."""

from sqlalchemy import Column, String, Text, DateTime
from kpi_backend.db.base import Base


class KPIUser(Base):
    """Employee record keyed by its case-insensitive employee code."""
    __tablename__ = "KPI_Users"
    __table_args__ = {"schema": "public"}

    id = Column("id", String(64), primary_key=True)
    name_code = Column(String(64), nullable=False, index=True)
    full_name = Column(String(255), nullable=True)
    role = Column(String(255), nullable=True)
    role_level = Column("roleLevel", String(64), nullable=True)
    can_approve = Column("canApprove", String(8), nullable=True)  # Y/N
    can_adjust = Column("canAdjust", String(8), nullable=True)  # Y/N
    team = Column(String(64), nullable=True)
    scope_view = Column("scopeView", Text, nullable=True)
    scope_approve = Column("scopeApprove", Text, nullable=True)
    scope_adjust = Column("scopeAdjust", Text, nullable=True)
    device_id = Column("deviceId", String(255), nullable=True)
    active = Column(String(8), nullable=True)  # Y/N
    pin = Column(String(32), nullable=True)
    pin_expires_at = Column(DateTime(timezone=True), nullable=True)
    pin_hash = Column(String(255), nullable=True)
    pin_salt = Column(String(255), nullable=True)
    dept_code = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)
