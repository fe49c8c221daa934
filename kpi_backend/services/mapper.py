"""Row mapper — the only place that reads raw store column names.

Rows arrive as loosely-typed mappings whose keys may be snake_case,
camelCase or the SQL aliases used by older queries. Keys are matched
case-insensitively with separators ignored.
"""

import re
from typing import Any, Mapping, Optional

from kpi_backend.schemas.schemas import RoundView, UserView

ROLE_LEVEL_ADMIN = 90
ROLE_LEVEL_LEAD = 50
ROLE_LEVEL_EMPLOYEE = 10

_LEAD_MARKERS = ("manager", "lead", "trưởng")


def is_yes(value: Any) -> bool:
    """True iff the trimmed, upper-cased text starts with "Y"."""
    if value is None:
        return False
    return str(value).strip().upper().startswith("Y")


def role_level(role_text: Any) -> int:
    """Derive the coarse authorization tier from free-text role."""
    text = str(role_text or "").lower()
    if "admin" in text:
        return ROLE_LEVEL_ADMIN
    if any(marker in text for marker in _LEAD_MARKERS):
        return ROLE_LEVEL_LEAD
    return ROLE_LEVEL_EMPLOYEE


def _norm(key: str) -> str:
    return re.sub(r"[^a-z0-9]", "", key.lower())


class _RawRow:
    """Case- and separator-insensitive view over a raw row."""

    def __init__(self, row: Mapping[str, Any]):
        self._values = {_norm(str(k)): v for k, v in row.items()}

    def get(self, *names: str) -> Any:
        for name in names:
            value = self._values.get(_norm(name))
            if value is not None:
                return value
        return None

    def text(self, *names: str) -> Optional[str]:
        value = self.get(*names)
        return None if value is None else str(value)


def map_user_row(row: Mapping[str, Any]) -> UserView:
    """Convert a raw KPI_Users row into the canonical user view."""
    raw = _RawRow(row)
    role = raw.text("role")
    return UserView(
        manv=raw.text("manv", "name_code"),
        full_name=raw.text("full_name"),
        role=role,
        role_level=role_level(role or raw.text("role_level", "role_level_txt")),
        can_approve=is_yes(raw.get("can_approve", "can_approve_txt")),
        can_adjust=is_yes(raw.get("can_adjust", "can_adjust_txt")),
        team_main=raw.text("team_main", "team"),
        scope_view=raw.text("scope_view"),
        scope_approve=raw.text("scope_approve"),
        scope_adjust=raw.text("scope_adjust"),
        device_id=raw.text("device_id"),
        active=is_yes(raw.get("active", "active_txt")),
        pin_expires_at=raw.get("pin_expires_at"),
        dept_code=raw.text("dept_code"),
        id=raw.text("id", "id_txt"),
        created_at=raw.get("created_at"),
        updated_at=raw.get("updated_at"),
        pin=raw.text("pin", "pin_plain"),
        pin_hash=raw.text("pin_hash"),
        pin_salt=raw.text("pin_salt"),
    )


def map_round_row(row: Mapping[str, Any]) -> RoundView:
    raw = _RawRow(row)
    return RoundView(
        id=raw.get("id"),
        manv=raw.text("manv"),
        round_label=raw.text("round_label", "ma_vong", "vong"),
        plate=raw.text("plate", "bien_so"),
        start_time=raw.get("start_time", "gio_di"),
        end_time=raw.get("end_time", "gio_ve"),
        date=raw.text("date", "ngay_txt"),
    )
