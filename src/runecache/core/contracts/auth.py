"""Authentication session contracts."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel


class AuthState(StrEnum):
    LOGGED_OUT = "LOGGED_OUT"
    AUTHENTICATING = "AUTHENTICATING"
    FULLY_AUTHENTICATED = "FULLY_AUTHENTICATED"


class User(BaseModel):
    id: str
    email: str | None = None
    email_confirmed_at: datetime | None = None

    model_config = {"frozen": True}

    @property
    def is_email_confirmed(self) -> bool:
        return self.email_confirmed_at is not None


def auth_state_for(user: User | None) -> AuthState:
    if user is None:
        return AuthState.LOGGED_OUT
    if not user.is_email_confirmed:
        return AuthState.AUTHENTICATING
    return AuthState.FULLY_AUTHENTICATED
