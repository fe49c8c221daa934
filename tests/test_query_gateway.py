import asyncio

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError

from kpi_backend.core.exceptions import BackendError
from kpi_backend.services.query_gateway import (
    QueryGateway,
    rounds_for_user_on_date_stmt,
    user_by_code_stmt,
    users_active_stmt,
    users_by_codes_stmt,
)


def compile_pg(stmt):
    compiled = stmt.compile(dialect=postgresql.dialect())
    return str(compiled), compiled.params


def test_user_by_code_is_parameterized_and_case_insensitive():
    sql, params = compile_pg(user_by_code_stmt("ABC123"))

    assert 'upper(public."KPI_Users".name_code) = upper(' in sql
    assert "LIMIT" in sql
    assert "ABC123" not in sql
    assert "ABC123" in params.values()


def test_users_by_codes_binds_upper_cased_codes():
    sql, params = compile_pg(users_by_codes_stmt(["e001", "E002"]))

    assert 'upper(public."KPI_Users".name_code) IN' in sql
    assert "E001" not in sql
    assert ["E001", "E002"] in params.values()


def test_users_active_filters_orders_and_limits():
    sql, params = compile_pg(users_active_stmt(500))

    assert 'upper(coalesce(public."KPI_Users".active,' in sql
    assert "LIKE" in sql
    assert 'ORDER BY public."KPI_Users".name_code ASC' in sql
    assert "LIMIT" in sql
    assert "Y%" in params.values()
    assert 500 in params.values()


def test_rounds_order_by_start_time_nulls_last_then_id():
    sql, params = compile_pg(rounds_for_user_on_date_stmt("E001", "2024-01-15"))

    assert "upper(public.rounds.manv) = upper(" in sql
    assert "public.rounds.ngay_txt =" in sql
    assert "public.rounds.gio_di ASC NULLS LAST" in sql
    assert sql.index("gio_di ASC NULLS LAST") < sql.index("public.rounds.id ASC")
    assert {"E001", "2024-01-15"} <= set(params.values())


class FakeResult:
    def __init__(self, rows):
        self._rows = rows

    def mappings(self):
        return self

    def all(self):
        return self._rows


class FakeSession:
    def __init__(self, rows=None, error=None):
        self.rows = rows or []
        self.error = error
        self.statements = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def execute(self, stmt):
        self.statements.append(stmt)
        if self.error is not None:
            raise self.error
        return FakeResult(self.rows)


def test_find_user_by_code_returns_first_row_as_dict():
    session = FakeSession(rows=[{"name_code": "E001", "active": "Y"}])
    gateway = QueryGateway(lambda: session)

    row = asyncio.run(gateway.find_user_by_code("E001"))

    assert row == {"name_code": "E001", "active": "Y"}
    assert len(session.statements) == 1


def test_find_user_by_code_without_match_returns_none():
    gateway = QueryGateway(lambda: FakeSession(rows=[]))
    assert asyncio.run(gateway.find_user_by_code("NOPE")) is None


def test_empty_batch_issues_no_query():
    session = FakeSession()
    gateway = QueryGateway(lambda: session)

    assert asyncio.run(gateway.find_users_by_codes([])) == []
    assert session.statements == []


@pytest.mark.parametrize(
    "error",
    [
        OperationalError("SELECT 1", {}, Exception("connection refused")),
        ConnectionRefusedError("connection refused"),
    ],
)
def test_store_errors_surface_as_backend_error(error):
    gateway = QueryGateway(lambda: FakeSession(error=error))

    with pytest.raises(BackendError) as exc_info:
        asyncio.run(gateway.find_users_active())

    assert exc_info.value.status_code == 500
    assert exc_info.value.payload() == {"ok": False, "error": "Backend unavailable"}


def test_users_limit_is_applied():
    session = FakeSession()
    gateway = QueryGateway(lambda: session, users_limit=25)

    asyncio.run(gateway.find_users_active())

    _, params = compile_pg(session.statements[0])
    assert 25 in params.values()
