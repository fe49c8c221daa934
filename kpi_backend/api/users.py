"""Users API router — directory listing and enrichment lookups."""

from typing import Any, List, Optional

from fastapi import APIRouter, Depends

from kpi_backend.db.session import get_gateway
from kpi_backend.schemas.schemas import (
    UsersListRequest, EnrichRequest, EnrichBatchRequest, EnrichUsersRequest,
)
from kpi_backend.services.mapper import map_user_row
from kpi_backend.services.query_gateway import QueryGateway
from kpi_backend.services.scope import filter_by_scope
from kpi_backend.core.exceptions import NotFoundError, ValidationError

router = APIRouter(tags=["users"])

USERS_LIST_PATHS = [
    "/users/list", "/listUsers", "/getUsers",
    "/users/query", "/users/search", "/users",
    "/user/list", "/user/query", "/user/search", "/user",
]


async def list_users(
    body: Optional[UsersListRequest] = None,
    gateway: QueryGateway = Depends(get_gateway),
):
    """Summaries of every active user, ordered by employee code."""
    users = [map_user_row(r) for r in await gateway.find_users_active()]
    items = [u.to_summary() for u in users]
    return {"ok": True, "items": items, "total": len(items)}


async def list_users_in_scope(
    body: Optional[UsersListRequest] = None,
    gateway: QueryGateway = Depends(get_gateway),
):
    """Active users restricted to the caller's scope_view teams."""
    users = [map_user_row(r) for r in await gateway.find_users_active()]
    if body is not None and body.manv:
        me = await gateway.find_user_by_code(body.manv)
        scope = map_user_row(me).scope_view if me is not None else None
        users = filter_by_scope(scope, users)
    items = [u.to_summary() for u in users]
    return {"ok": True, "items": items, "total": len(items)}


for _path in USERS_LIST_PATHS:
    router.add_api_route(_path, list_users, methods=["POST"])
router.add_api_route("/listUsersInScope", list_users_in_scope, methods=["POST"])


async def _enrich_one(gateway: QueryGateway, manv: str) -> dict:
    row = await gateway.find_user_by_code(manv)
    if row is None:
        raise NotFoundError()
    return {"ok": True, "user": map_user_row(row).to_payload()}


async def _enrich_many(gateway: QueryGateway, manvs: Optional[List[Any]]) -> dict:
    raw = (str(m).strip().upper() for m in manvs or [] if m is not None)
    codes = sorted({code for code in raw if code})
    users = {}
    for row in await gateway.find_users_by_codes(codes):
        view = map_user_row(row)
        users[(view.manv or "").upper()] = view.to_payload()
    return {"ok": True, "users": users}


@router.post("/users/enrich")
async def enrich_user(body: EnrichRequest, gateway: QueryGateway = Depends(get_gateway)):
    """Full view of a single user."""
    return await _enrich_one(gateway, body.manv)


@router.post("/users/enrichBatch")
async def enrich_users_batch(
    body: Optional[EnrichBatchRequest] = None,
    gateway: QueryGateway = Depends(get_gateway),
):
    """Full views keyed by upper-cased employee code; unknown codes are omitted."""
    return await _enrich_many(gateway, body.manvs if body is not None else None)


@router.post("/enrichUsers")
async def enrich_users(body: EnrichUsersRequest, gateway: QueryGateway = Depends(get_gateway)):
    """Legacy alias: batch when ``manvs`` is a list, single otherwise."""
    if body.manvs is not None:
        return await _enrich_many(gateway, body.manvs)
    manv = (body.manv or "").strip().upper()
    if not manv:
        raise ValidationError("manv: Field required")
    return await _enrich_one(gateway, manv)
