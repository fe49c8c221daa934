from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

import pytest
from fastapi.testclient import TestClient

from kpi_backend.core.config import Settings
from kpi_backend.core.exceptions import BackendError
from kpi_backend.main import create_app
from kpi_backend.services.mapper import is_yes


def user_row(code: str, **overrides: Any) -> dict:
    """Raw KPI_Users row keyed the way the store returns it."""
    row = {
        "id": f"id-{code.lower()}",
        "name_code": code,
        "full_name": f"Employee {code}",
        "role": "Driver",
        "roleLevel": None,
        "canApprove": "N",
        "canAdjust": "N",
        "team": None,
        "scopeView": None,
        "scopeApprove": None,
        "scopeAdjust": None,
        "deviceId": None,
        "active": "Y",
        "pin": "1234",
        "pin_expires_at": None,
        "pin_hash": None,
        "pin_salt": None,
        "dept_code": "OPS",
        "created_at": None,
        "updated_at": None,
    }
    row.update(overrides)
    return row


@dataclass
class FakeGateway:
    """In-memory stand-in for QueryGateway with the store's matching rules."""

    users: list[dict] = field(default_factory=list)
    rounds: list[dict] = field(default_factory=list)
    fail: bool = False
    calls: list[tuple] = field(default_factory=list)

    def _check(self, *call: Any) -> None:
        self.calls.append(call)
        if self.fail:
            raise BackendError()

    async def find_user_by_code(self, code: str) -> Optional[dict]:
        self._check("find_user_by_code", code)
        for row in self.users:
            if row["name_code"].upper() == code.upper():
                return dict(row)
        return None

    async def find_users_by_codes(self, codes) -> list[dict]:
        self._check("find_users_by_codes", list(codes))
        wanted = {c.upper() for c in codes}
        return [dict(r) for r in self.users if r["name_code"].upper() in wanted]

    async def find_users_active(self) -> list[dict]:
        self._check("find_users_active")
        active = [dict(r) for r in self.users if is_yes(r.get("active"))]
        return sorted(active, key=lambda r: r["name_code"])[:500]

    async def find_rounds_for_user_on_date(self, code: str, date: str) -> list[dict]:
        self._check("find_rounds_for_user_on_date", code, date)
        rows = [
            dict(r) for r in self.rounds
            if r["manv"].upper() == code.upper() and r["ngay_txt"] == date
        ]
        return sorted(rows, key=lambda r: (r["gio_di"] is None, r["gio_di"] or "", r["id"]))


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway(
        users=[
            user_row("E001", pin="4321", team="T1", scopeView="t1; t2"),
            user_row("E002", full_name="Tran Van B", team="T2", role="Team Lead"),
            user_row("E003", team="T3", role="Admin"),
            user_row("E004", team=None),
            user_row("E005", active="N"),
        ],
    )


@pytest.fixture
def app_settings() -> Settings:
    return Settings(API_KEY=None, ALLOW_ORIGIN="https://kpi.example.com")


@pytest.fixture
def client(gateway, app_settings) -> TestClient:
    return TestClient(create_app(gateway=gateway, app_settings=app_settings))


@pytest.fixture
def make_user_row():
    return user_row
