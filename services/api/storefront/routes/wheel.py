"""Wheel of fortune endpoints.

GET  /api/wheel/config       - Products on the wheel and today's winning slot
GET  /api/wheel/eligibility  - Whether the signed-in user may spin
POST /api/wheel/spin         - Record a spin (eligible users only)
"""

import logging

from fastapi import APIRouter, Cookie
from fastapi.responses import JSONResponse

from storefront.schemas import failure, success
from storefront.services.auth import SESSION_COOKIE_NAME, resolve_user
from storefront.services.cms_client import CmsError
from storefront.services.wheel import check_eligibility, get_wheel_configuration, record_spin
from storefront.stores.postgres import get_session

router = APIRouter()
logger = logging.getLogger("uvicorn.error")


@router.get("/config")
async def get_config() -> JSONResponse:
    try:
        config = await get_wheel_configuration()
    except CmsError:
        logger.exception("[wheel] failed to load configuration")
        return JSONResponse(status_code=500, content=failure("Failed to load wheel configuration"))
    return JSONResponse(content=success(config))


@router.get("/eligibility")
async def get_eligibility(
    session_token: str | None = Cookie(default=None, alias=SESSION_COOKIE_NAME),
) -> JSONResponse:
    async with get_session() as session:
        user = await resolve_user(session, session_token)
        eligibility = await check_eligibility(session, user.id if user else None)
    return JSONResponse(content=success(eligibility.to_dict()))


@router.post("/spin")
async def post_spin(
    session_token: str | None = Cookie(default=None, alias=SESSION_COOKIE_NAME),
) -> JSONResponse:
    """Record today's spin; the prize slot comes from /config."""
    async with get_session() as session:
        user = await resolve_user(session, session_token)
        if user is None:
            return JSONResponse(status_code=401, content=failure("Not signed in"))

        eligibility = await check_eligibility(session, user.id)
        if not eligibility.is_eligible:
            return JSONResponse(
                status_code=403,
                content=failure(eligibility.reason, eligibility=eligibility.to_dict()),
            )

        spin = await record_spin(session, user.id)
        payload = {"id": spin.id, "userId": spin.user_id, "spunAt": spin.spun_at.isoformat()}

    return JSONResponse(content=success(payload))
