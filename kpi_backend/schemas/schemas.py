"""Pydantic schemas for API request validation and canonical views."""

from pydantic import BaseModel, Field, StringConstraints, field_validator
from typing import Optional, List, Dict, Any, Annotated


# Employee codes are trimmed and upper-cased before any query or comparison.
EmployeeCode = Annotated[str, StringConstraints(strip_whitespace=True, to_upper=True, min_length=1)]


# ---- Auth ----
class WhoAmIRequest(BaseModel):
    manv: EmployeeCode
    pin: Optional[str] = None

class CheckUserAuthRequest(BaseModel):
    manv: EmployeeCode
    pin: str = Field(..., min_length=1)


# ---- Users ----
class UsersListRequest(BaseModel):
    manv: Optional[str] = None

    @field_validator("manv")
    @classmethod
    def normalize_manv(cls, v: Optional[str]) -> Optional[str]:
        v = (v or "").strip().upper()
        return v or None

class EnrichRequest(BaseModel):
    manv: EmployeeCode

class EnrichBatchRequest(BaseModel):
    manvs: Optional[List[Any]] = None

class EnrichUsersRequest(BaseModel):
    manv: Optional[str] = None
    manvs: Optional[List[Any]] = None


# ---- Rounds ----
class RoundsRequest(BaseModel):
    manv: EmployeeCode
    date: Optional[str] = Field(None, min_length=8)
    vong: Optional[str] = None
    plate: Optional[str] = None

    @field_validator("date")
    @classmethod
    def truncate_date(cls, v: Optional[str]) -> Optional[str]:
        """Keep the YYYY-MM-DD prefix of date-like strings (e.g. full ISO timestamps)."""
        if v is None:
            return None
        return v.strip()[:10]


# ---- Canonical views ----
_CAMEL_ALIASES = {
    "full_name": "fullName",
    "role_level": "roleLevel",
    "can_approve": "canApprove",
    "can_adjust": "canAdjust",
    "team_main": "teamMain",
    "scope_view": "scopeView",
    "scope_approve": "scopeApprove",
    "scope_adjust": "scopeAdjust",
    "device_id": "deviceId",
    "pin_expires_at": "pinExpiresAt",
    "dept_code": "deptCode",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
}

_SUMMARY_FIELDS = {
    "manv", "full_name", "role", "role_level", "can_approve",
    "can_adjust", "team_main", "scope_view", "active",
}


class UserView(BaseModel):
    """Canonical user view built from a raw KPI_Users row."""
    manv: Optional[str] = None
    full_name: Optional[str] = None
    role: Optional[str] = None
    role_level: int = 10
    can_approve: bool = False
    can_adjust: bool = False
    team_main: Optional[str] = None
    scope_view: Optional[str] = None
    scope_approve: Optional[str] = None
    scope_adjust: Optional[str] = None
    device_id: Optional[str] = None
    active: bool = False
    pin_expires_at: Optional[Any] = None
    dept_code: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[Any] = None
    updated_at: Optional[Any] = None

    # Credentials: used for verification, never serialized to clients.
    pin: Optional[str] = Field(None, exclude=True)
    pin_hash: Optional[str] = Field(None, exclude=True)
    pin_salt: Optional[str] = Field(None, exclude=True)

    def to_payload(self) -> Dict[str, Any]:
        """Full view with both snake_case and camelCase keys."""
        data = self.model_dump()
        data["name"] = self.full_name
        for snake, camel in _CAMEL_ALIASES.items():
            data[camel] = data[snake]
        return data

    def to_summary(self) -> Dict[str, Any]:
        """Compact view used by list endpoints."""
        return self.model_dump(include=_SUMMARY_FIELDS)


class RoundView(BaseModel):
    """Canonical duty round view."""
    id: Optional[Any] = None
    manv: Optional[str] = None
    round_label: Optional[str] = None
    plate: Optional[str] = None
    start_time: Optional[Any] = None
    end_time: Optional[Any] = None
    date: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        data = self.model_dump()
        data["vong"] = self.round_label
        data["route"] = None
        return data


# ---- Generic ----
class InitParams(BaseModel):
    today: str
    userRole: str
    featureFlags: List[str]
    version: int
