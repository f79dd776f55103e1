"""Session port: the host authentication subsystem."""

from typing import Any, Awaitable, Callable, Protocol

from domain.model.signup import LoginResult, RequestContext
from domain.model.user import Identity

LoginCallback = Callable[[Identity, LoginResult, Any, RequestContext], Awaitable[None]]
"""Awaited with (identity, result, response, context); may mutate `result`."""


class SessionService(Protocol):
    async def run_login_callbacks(
        self,
        identity: Identity,
        result: LoginResult,
        response: Any,
        context: RequestContext,
    ) -> None: ...

    def establish_session(self, identity: Identity, response: Any) -> None: ...
