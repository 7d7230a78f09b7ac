"""Authentication service: users, password hashes, cookie sessions.

Session model:
- The browser holds an opaque token (20 random bytes, base32 lowercase)
- The database stores only sha256(token) as the session id
- Sessions last SESSION_TTL_DAYS and are extended when validated within
  SESSION_REFRESH_DAYS of expiry; expired sessions are deleted on sight

Password hashes are sha256 hex digests, matching the rows already in the
User table.
"""

import base64
import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.models import Session, User
from storefront.settings import get_settings

logger = logging.getLogger("uvicorn.error")

SESSION_COOKIE_NAME = "session"


class AuthError(RuntimeError):
    """Raised for failed registration or login."""


@dataclass
class SessionValidationResult:
    """Outcome of validating a session token (both None when invalid)."""

    session: Session | None
    user: User | None


def generate_session_token() -> str:
    """Random session token for the cookie."""
    return base64.b32encode(secrets.token_bytes(20)).decode("ascii").lower().rstrip("=")


def session_id_from_token(token: str) -> str:
    """Database key of a session token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def verify_password(password: str, password_hash: str) -> bool:
    return hmac.compare_digest(hash_password(password), password_hash)


def normalize_email(email: str) -> str:
    return email.strip().lower()


# ============================================================
# Users
# ============================================================


async def find_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == normalize_email(email)))
    return result.scalar_one_or_none()


async def create_user(session: AsyncSession, email: str, password_hash: str) -> User:
    """Insert a user row.

    Raises:
        AuthError: Email already registered.
    """
    user = User(email=normalize_email(email), password_hash=password_hash)
    session.add(user)
    try:
        await session.flush()
    except IntegrityError as e:
        raise AuthError("An account with this email already exists") from e
    return user


async def register_user(session: AsyncSession, email: str, password: str) -> User:
    """Register a new account."""
    if await find_user_by_email(session, email):
        raise AuthError("An account with this email already exists")
    user = await create_user(session, email, hash_password(password))
    logger.info(f"[auth] registered user id={user.id}")
    return user


async def login_user(session: AsyncSession, email: str, password: str) -> User:
    """Check credentials.

    Raises:
        AuthError: Unknown email or wrong password (same message for both).
    """
    user = await find_user_by_email(session, email)
    if user is None or not verify_password(password, user.password_hash):
        raise AuthError("Invalid email or password")
    return user


# ============================================================
# Sessions
# ============================================================


async def create_session(session: AsyncSession, token: str, user_id: int) -> Session:
    """Persist a session for `token`."""
    settings = get_settings()
    db_session = Session(
        id=session_id_from_token(token),
        user_id=user_id,
        expires_at=datetime.now(timezone.utc) + timedelta(days=settings.session_ttl_days),
    )
    session.add(db_session)
    await session.flush()
    return db_session


async def validate_session_token(session: AsyncSession, token: str) -> SessionValidationResult:
    """Resolve a cookie token to its session and user."""
    settings = get_settings()
    session_id = session_id_from_token(token)

    result = await session.execute(
        select(Session, User).join(User, Session.user_id == User.id).where(Session.id == session_id)
    )
    row = result.first()
    if row is None:
        return SessionValidationResult(session=None, user=None)

    db_session, user = row
    now = datetime.now(timezone.utc)
    expires_at = db_session.expires_at
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)

    if now >= expires_at:
        await session.delete(db_session)
        await session.flush()
        return SessionValidationResult(session=None, user=None)

    if now >= expires_at - timedelta(days=settings.session_refresh_days):
        db_session.expires_at = now + timedelta(days=settings.session_ttl_days)
        await session.flush()

    return SessionValidationResult(session=db_session, user=user)


async def invalidate_session(session: AsyncSession, session_id: str) -> None:
    await session.execute(delete(Session).where(Session.id == session_id))


async def delete_expired_sessions(session: AsyncSession) -> int:
    """Remove expired sessions; returns how many were deleted."""
    result = await session.execute(
        delete(Session).where(Session.expires_at < datetime.now(timezone.utc))
    )
    return result.rowcount or 0


async def resolve_user(session: AsyncSession, token: str | None) -> User | None:
    """User behind a session cookie value, or None for anonymous requests."""
    if not token:
        return None
    return (await validate_session_token(session, token)).user
