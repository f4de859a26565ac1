"""Authentication session state."""

from __future__ import annotations

from runecache.core.contracts.auth import AuthState, User, auth_state_for
from runecache.core.contracts.events import AuthChanged, Signal


class AuthSession:
    """Holds the signed-in user and announces state transitions.

    Sign-in flows live outside this package; they report their outcome through
    ``set_user``. A user without a confirmed email is ``AUTHENTICATING``.
    """

    def __init__(self, user: User | None = None) -> None:
        self._user = user
        self.changes: Signal[AuthChanged] = Signal()

    @property
    def user(self) -> User | None:
        return self._user

    @property
    def user_id(self) -> str | None:
        return self._user.id if self._user is not None else None

    @property
    def state(self) -> AuthState:
        return auth_state_for(self._user)

    @property
    def is_fully_authenticated(self) -> bool:
        return self.state is AuthState.FULLY_AUTHENTICATED

    def set_user(self, user: User | None) -> None:
        previous_state = self.state
        previous_id = self.user_id
        self._user = user
        if previous_state is self.state and previous_id == self.user_id:
            return
        self.changes.emit(AuthChanged(previous=previous_state, current=self.state, user=user))

    def sign_out(self) -> None:
        self.set_user(None)
