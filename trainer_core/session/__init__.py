from trainer_core.session.auth import AuthAction, AuthContext, auth_reducer
from trainer_core.session.orchestrator import Screen, SessionNotStartedError, SessionOrchestrator

__all__ = [
    "AuthAction", "AuthContext", "auth_reducer",
    "Screen", "SessionNotStartedError", "SessionOrchestrator",
]
