"""Auth API router — whoAmI (lenient lookup) and checkUserAuth (strict)."""

from fastapi import APIRouter, Depends

from kpi_backend.db.session import get_gateway
from kpi_backend.schemas.schemas import WhoAmIRequest, CheckUserAuthRequest
from kpi_backend.services.auth_service import AuthOutcome, check_auth
from kpi_backend.services.mapper import map_user_row
from kpi_backend.services.query_gateway import QueryGateway
from kpi_backend.core.exceptions import AuthError

router = APIRouter(tags=["auth"])

# Sub-object reported by whoAmI for each failed outcome.
_WHOAMI_FAILURES = {
    AuthOutcome.NOT_FOUND: ("notFound", "Không tìm thấy Mã NV."),
    AuthOutcome.INACTIVE: ("notActive", "Tài khoản chưa kích hoạt."),
    AuthOutcome.INVALID_PIN: ("invalidPin", "PIN không đúng."),
    AuthOutcome.PIN_EXPIRED: ("pinExpired", "PIN đã hết hạn."),
}


async def _lookup(gateway: QueryGateway, manv: str):
    row = await gateway.find_user_by_code(manv)
    return map_user_row(row) if row is not None else None


@router.post("/whoAmI")
async def who_am_i(body: WhoAmIRequest, gateway: QueryGateway = Depends(get_gateway)):
    """Identify an employee for the login screen; failures stay ok:true."""
    user = await _lookup(gateway, body.manv)
    has_pin = bool(body.pin and body.pin.strip())
    result = check_auth(user, body.pin, verify_pin=has_pin)
    if not result.ok:
        flag, msg = _WHOAMI_FAILURES[result.outcome]
        return {"ok": True, "user": {flag: True, "msg": msg}}
    return {"ok": True, "user": result.user.to_payload()}


@router.post("/checkUserAuth")
async def check_user_auth(body: CheckUserAuthRequest, gateway: QueryGateway = Depends(get_gateway)):
    """Strict PIN authentication; failures carry an error code."""
    user = await _lookup(gateway, body.manv)
    result = check_auth(user, body.pin)
    if not result.ok:
        raise AuthError(result.outcome.value)
    return {"ok": True, "user": result.user.to_payload()}
