"""Models package — tables this service reads."""

from kpi_backend.models.user import KPIUser
from kpi_backend.models.round import Round

__all__ = ["KPIUser", "Round"]
