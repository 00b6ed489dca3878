"""Explicit auth context, passed by reference to the session orchestrator."""

import logging
from enum import Enum
from typing import Callable, Optional

from trainer_core.schemas.profile_schema import AuthState, User

logger = logging.getLogger(__name__)


class AuthAction(str, Enum):
    LOGIN = "login"
    LOGOUT = "logout"
    SET_LOADING = "set_loading"


def auth_reducer(state: AuthState, action: AuthAction, payload: object = None) -> AuthState:
    """Return the next AuthState. Unknown payloads for an action raise."""
    if action is AuthAction.LOGIN:
        if not isinstance(payload, User):
            raise TypeError("LOGIN requires a User payload")
        return AuthState(is_authenticated=True, user=payload, is_loading=False)
    if action is AuthAction.LOGOUT:
        return AuthState(is_authenticated=False, user=None, is_loading=False)
    if action is AuthAction.SET_LOADING:
        return AuthState(
            is_authenticated=state.is_authenticated, user=state.user, is_loading=bool(payload)
        )
    return state


class AuthContext:
    """Holds the current AuthState and notifies subscribers on change."""

    def __init__(self, state: Optional[AuthState] = None) -> None:
        self._state = state or AuthState()
        self._listeners: list[Callable[[AuthState], None]] = []

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def user(self) -> Optional[User]:
        return self._state.user

    def subscribe(self, listener: Callable[[AuthState], None]) -> None:
        self._listeners.append(listener)

    def dispatch(self, action: AuthAction, payload: object = None) -> AuthState:
        self._state = auth_reducer(self._state, action, payload)
        logger.debug("Auth %s -> authenticated=%s", action.value, self._state.is_authenticated)
        for listener in list(self._listeners):
            listener(self._state)
        return self._state

    def login(self, user: User) -> AuthState:
        return self.dispatch(AuthAction.LOGIN, user)

    def logout(self) -> AuthState:
        return self.dispatch(AuthAction.LOGOUT)

    def set_loading(self, loading: bool) -> AuthState:
        return self.dispatch(AuthAction.SET_LOADING, loading)
