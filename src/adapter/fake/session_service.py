"""In-memory implementation of SessionService for testing."""

from typing import Any

from domain.model.signup import LoginResult, RequestContext
from domain.model.user import Identity
from port.session_service import LoginCallback


class FakeSessionService:
    def __init__(self, login_callbacks: list[LoginCallback] | None = None):
        self.login_callbacks = list(login_callbacks or [])
        self.sessions: list[Identity] = []
        self.callback_runs: list[Identity] = []

    async def run_login_callbacks(
        self,
        identity: Identity,
        result: LoginResult,
        response: Any,
        context: RequestContext,
    ) -> None:
        self.callback_runs.append(identity)
        for callback in self.login_callbacks:
            await callback(identity, result, response, context)

    def establish_session(self, identity: Identity, response: Any) -> None:
        self.sessions.append(identity)
