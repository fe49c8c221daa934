"""Rounds API router — an employee's duty trips for a day."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from kpi_backend.db.session import get_gateway
from kpi_backend.schemas.schemas import RoundsRequest
from kpi_backend.services.mapper import map_round_row
from kpi_backend.services.query_gateway import QueryGateway

router = APIRouter(tags=["rounds"])

ROUNDS_PATHS = ["/getRoundsForUser", "/getRounds", "/rounds", "/rounds/list"]


def _matches(value, wanted) -> bool:
    if not wanted or not wanted.strip():
        return True
    return str(value or "").strip().upper() == wanted.strip().upper()


async def _rounds_for(gateway: QueryGateway, req: RoundsRequest) -> dict:
    day = req.date or date.today().isoformat()
    rows = await gateway.find_rounds_for_user_on_date(req.manv, day)
    rounds = [
        r for r in map(map_round_row, rows)
        if _matches(r.round_label, req.vong) and _matches(r.plate, req.plate)
    ]
    return {"ok": True, "rounds": [r.to_payload() for r in rounds], "total": len(rounds)}


async def rounds_from_body(body: RoundsRequest, gateway: QueryGateway = Depends(get_gateway)):
    """Rounds ordered by start time (unscheduled last), then id."""
    return await _rounds_for(gateway, body)


async def rounds_from_query(
    params: Annotated[RoundsRequest, Query()],
    gateway: QueryGateway = Depends(get_gateway),
):
    return await _rounds_for(gateway, params)


for _path in ROUNDS_PATHS:
    router.add_api_route(_path, rounds_from_body, methods=["POST"])
    router.add_api_route(_path, rounds_from_query, methods=["GET"])
