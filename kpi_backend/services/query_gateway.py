"""Query gateway — the fixed set of parameterized reads against the KPI store."""

import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import Select, func, select, text
from sqlalchemy.exc import SQLAlchemyError

from kpi_backend.core.exceptions import BackendError
from kpi_backend.models import KPIUser, Round

logger = logging.getLogger("kpi_backend")

Row = Dict[str, Any]

USER_COLUMNS = tuple(KPIUser.__table__.columns)
ROUND_COLUMNS = tuple(Round.__table__.columns)


def user_by_code_stmt(code: str) -> Select:
    return (
        select(*USER_COLUMNS)
        .where(func.upper(KPIUser.name_code) == func.upper(code))
        .limit(1)
    )


def users_by_codes_stmt(codes: Sequence[str]) -> Select:
    return select(*USER_COLUMNS).where(
        func.upper(KPIUser.name_code).in_([c.upper() for c in codes])
    )


def users_active_stmt(limit: int = 500) -> Select:
    return (
        select(*USER_COLUMNS)
        .where(func.upper(func.coalesce(KPIUser.active, "")).like("Y%"))
        .order_by(KPIUser.name_code.asc())
        .limit(limit)
    )


def rounds_for_user_on_date_stmt(code: str, date: str) -> Select:
    return (
        select(*ROUND_COLUMNS)
        .where(func.upper(Round.manv) == func.upper(code), Round.date == date)
        .order_by(Round.start_time.asc().nulls_last(), Round.id.asc())
    )


class QueryGateway:
    """Issues single-statement reads through a shared async session factory.

    Store failures surface as BackendError; nothing is retried or cached.
    """

    def __init__(self, session_factory, users_limit: int = 500):
        self._session_factory = session_factory
        self._users_limit = users_limit

    async def _fetch(self, stmt, operation: str, params: Any = None) -> List[Row]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return [dict(row) for row in result.mappings().all()]
        except (SQLAlchemyError, OSError) as exc:
            logger.exception("%s failed (params=%r)", operation, params)
            raise BackendError() from exc

    async def find_user_by_code(self, code: str) -> Optional[Row]:
        rows = await self._fetch(user_by_code_stmt(code), "find_user_by_code", code)
        return rows[0] if rows else None

    async def find_users_by_codes(self, codes: Sequence[str]) -> List[Row]:
        if not codes:
            return []
        return await self._fetch(users_by_codes_stmt(codes), "find_users_by_codes", list(codes))

    async def find_users_active(self) -> List[Row]:
        return await self._fetch(users_active_stmt(self._users_limit), "find_users_active")

    async def find_rounds_for_user_on_date(self, code: str, date: str) -> List[Row]:
        return await self._fetch(
            rounds_for_user_on_date_stmt(code, date),
            "find_rounds_for_user_on_date",
            (code, date),
        )

    async def ping(self) -> bool:
        await self._fetch(text("SELECT 1 AS ok"), "ping")
        return True
