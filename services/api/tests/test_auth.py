"""Tests for auth helpers and session validation (fake DB session)."""

from datetime import datetime, timedelta, timezone

import pytest

from storefront.models import Session, User
from storefront.services.auth import (
    generate_session_token,
    hash_password,
    normalize_email,
    session_id_from_token,
    validate_session_token,
    verify_password,
)


class FakeResult:
    def __init__(self, row):
        self.row = row

    def first(self):
        return self.row


class FakeDbSession:
    """Returns one (Session, User) row for any select."""

    def __init__(self, row):
        self.row = row
        self.deleted = []
        self.flushes = 0

    async def execute(self, statement):
        return FakeResult(self.row)

    async def delete(self, obj):
        self.deleted.append(obj)

    async def flush(self):
        self.flushes += 1


def _row(token: str, expires_in: timedelta):
    user = User(id=1, email="ann@example.com", password_hash=hash_password("secret-pass"))
    db_session = Session(
        id=session_id_from_token(token),
        user_id=1,
        expires_at=datetime.now(timezone.utc) + expires_in,
    )
    return db_session, user


def test_session_token_format():
    token = generate_session_token()
    assert len(token) == 32
    assert token == token.lower()
    assert "=" not in token
    assert generate_session_token() != token


def test_session_id_is_sha256_hex():
    assert session_id_from_token("abc") == (
        "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    )


def test_password_hash_roundtrip():
    hashed = hash_password("Secret123!")
    assert len(hashed) == 64
    assert verify_password("Secret123!", hashed)
    assert not verify_password("secret123!", hashed)


def test_normalize_email():
    assert normalize_email("  Ann@Example.COM ") == "ann@example.com"


@pytest.mark.asyncio
async def test_validate_unknown_token():
    result = await validate_session_token(FakeDbSession(None), "nope")
    assert result.session is None
    assert result.user is None


@pytest.mark.asyncio
async def test_validate_expired_session_deletes_it():
    db = FakeDbSession(_row("tok", timedelta(minutes=-1)))
    result = await validate_session_token(db, "tok")
    assert result.user is None
    assert len(db.deleted) == 1


@pytest.mark.asyncio
async def test_validate_fresh_session_is_not_extended():
    row = _row("tok", timedelta(days=29))
    expires_at = row[0].expires_at
    result = await validate_session_token(FakeDbSession(row), "tok")
    assert result.user.email == "ann@example.com"
    assert result.session.expires_at == expires_at


@pytest.mark.asyncio
async def test_validate_session_near_expiry_is_extended():
    row = _row("tok", timedelta(days=2))
    result = await validate_session_token(FakeDbSession(row), "tok")
    assert result.session.expires_at > datetime.now(timezone.utc) + timedelta(days=29)
