"""Pydantic v2 models for authentication tokens and the signed-in user."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class TokenPair(BaseModel):
    """Access/refresh token bundle returned by the auth endpoints.

    Both tokens are required, so a half-populated pair cannot be built.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class User(BaseModel):
    """The administrator currently signed in."""

    id: str
    email: str
    role: str
