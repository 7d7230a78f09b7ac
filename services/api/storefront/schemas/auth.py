"""Schemas for the auth API (/api/auth)."""

from pydantic import BaseModel, Field


class Credentials(BaseModel):
    """Request body for POST /api/auth/login."""

    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=128)


class Registration(Credentials):
    """Request body for POST /api/auth/register."""

    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=8, max_length=128)
