"""Auth endpoints (email + password, cookie sessions).

POST /api/auth/register
POST /api/auth/login
POST /api/auth/logout
GET  /api/auth/me
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Cookie
from fastapi.responses import JSONResponse

from storefront.models import User
from storefront.schemas import Credentials, Registration, failure, success
from storefront.services.auth import (
    SESSION_COOKIE_NAME,
    AuthError,
    create_session,
    generate_session_token,
    invalidate_session,
    login_user,
    register_user,
    resolve_user,
    session_id_from_token,
)
from storefront.settings import get_settings
from storefront.stores.postgres import get_session

router = APIRouter()
logger = logging.getLogger("uvicorn.error")


def _user_payload(user: User) -> dict:
    return {"id": user.id, "email": user.email}


def _set_session_cookie(response: JSONResponse, token: str, expires_at: datetime) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        secure=not get_settings().debug,
        expires=expires_at,
        path="/",
    )


async def _start_session(user: User, status_code: int = 200) -> JSONResponse:
    token = generate_session_token()
    async with get_session() as session:
        db_session = await create_session(session, token, user.id)
        expires_at = db_session.expires_at

    response = JSONResponse(status_code=status_code, content=success(_user_payload(user)))
    _set_session_cookie(response, token, expires_at.astimezone(timezone.utc))
    return response


@router.post("/register")
async def register(body: Registration) -> JSONResponse:
    try:
        async with get_session() as session:
            user = await register_user(session, body.email, body.password)
    except AuthError as e:
        return JSONResponse(status_code=400, content=failure(str(e)))

    return await _start_session(user, status_code=201)


@router.post("/login")
async def login(body: Credentials) -> JSONResponse:
    try:
        async with get_session() as session:
            user = await login_user(session, body.email, body.password)
    except AuthError as e:
        logger.info(f"[auth] failed login email={body.email}")
        return JSONResponse(status_code=401, content=failure(str(e)))

    return await _start_session(user)


@router.post("/logout")
async def logout(
    session_token: str | None = Cookie(default=None, alias=SESSION_COOKIE_NAME),
) -> JSONResponse:
    if session_token:
        async with get_session() as session:
            await invalidate_session(session, session_id_from_token(session_token))

    response = JSONResponse(content=success(None))
    response.delete_cookie(SESSION_COOKIE_NAME, path="/", httponly=True, samesite="lax")
    return response


@router.get("/me")
async def me(
    session_token: str | None = Cookie(default=None, alias=SESSION_COOKIE_NAME),
) -> JSONResponse:
    async with get_session() as session:
        user = await resolve_user(session, session_token)
        payload = _user_payload(user) if user else None

    if payload is None:
        return JSONResponse(status_code=401, content=failure("Not signed in"))
    return JSONResponse(content=success(payload))
