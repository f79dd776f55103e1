"""Cookie-based implementation of SessionService.

The session is a signed token (purpose "session") set as an HTTP-only cookie.
"""

import logging
from datetime import timedelta
from typing import Any

from domain.model.signup import LoginResult, RequestContext
from domain.model.user import Identity
from port.session_service import LoginCallback
from port.token_service import TokenService

logger = logging.getLogger(__name__)

SESSION_TOKEN_PURPOSE = "session"


class CookieSessionService:
    def __init__(
        self,
        tokens: TokenService,
        cookie_name: str = "opensignup_session",
        expiration: timedelta = timedelta(days=7),
        secure: bool = True,
        login_callbacks: list[LoginCallback] | None = None,
    ):
        self.tokens = tokens
        self.cookie_name = cookie_name
        self.expiration = expiration
        self.secure = secure
        self.login_callbacks = list(login_callbacks or [])

    def add_login_callback(self, callback: LoginCallback) -> None:
        self.login_callbacks.append(callback)

    async def run_login_callbacks(
        self,
        identity: Identity,
        result: LoginResult,
        response: Any,
        context: RequestContext,
    ) -> None:
        for callback in self.login_callbacks:
            await callback(identity, result, response, context)
            if not result.allowed_login:
                logger.info("Login rejected by callback", extra={
                    "userId": identity.pk,
                    "callback": getattr(callback, '__name__', repr(callback)),
                })
                break

    def establish_session(self, identity: Identity, response: Any) -> None:
        token = self.tokens.issue(
            {"sub": str(identity.pk), "username": identity.username},
            SESSION_TOKEN_PURPOSE,
            self.expiration,
        )
        response.set_cookie(
            key=self.cookie_name,
            value=token,
            max_age=int(self.expiration.total_seconds()),
            httponly=True,
            secure=self.secure,
            samesite="lax",
        )
        logger.info("Session established", extra={"userId": identity.pk})
