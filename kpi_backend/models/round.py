"""Duty round model (one row per scheduled trip)."""

from sqlalchemy import Column, Integer, String
from kpi_backend.db.base import Base


class Round(Base):
    """Scheduled duty trip for an employee on a calendar day."""
    __tablename__ = "rounds"
    __table_args__ = {"schema": "public"}

    id = Column(Integer, primary_key=True)
    manv = Column(String(64), nullable=False, index=True)
    round_label = Column("ma_vong", String(64), nullable=True)
    plate = Column("bien_so", String(32), nullable=True)
    start_time = Column("gio_di", String(16), nullable=True)
    end_time = Column("gio_ve", String(16), nullable=True)
    date = Column("ngay_txt", String(10), nullable=False)  # YYYY-MM-DD
