"""Service endpoints — health, client init parameters, logout."""

import time
from datetime import date

from fastapi import APIRouter, Request

from kpi_backend.schemas.schemas import InitParams

router = APIRouter(tags=["system"])

ANY_METHOD = ["GET", "POST", "PUT", "PATCH", "DELETE"]


async def health():
    """Liveness probe; does not touch the store."""
    return {"ok": True, "ts": int(time.time() * 1000)}


async def get_init_params(request: Request):
    """Bootstrap values for the frontend."""
    app_settings = request.app.state.settings
    init = InitParams(
        today=date.today().isoformat(),
        userRole=app_settings.INIT_USER_ROLE,
        featureFlags=list(app_settings.FEATURE_FLAGS),
        version=app_settings.INIT_VERSION,
    )
    return {"ok": True, "init": init.model_dump()}


async def logout():
    # Sessions live client-side; nothing to revoke.
    return {"ok": True}


router.add_api_route("/health", health, methods=ANY_METHOD)
router.add_api_route("/getInitParams", get_init_params, methods=["GET", "POST"])
for _path in ("/logout", "/signout"):
    router.add_api_route(_path, logout, methods=ANY_METHOD)
