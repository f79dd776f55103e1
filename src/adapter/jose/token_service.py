"""python-jose implementation of TokenService."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from jose import JWTError, jwt

from domain.model.errors import TokenError

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
PURPOSE_CLAIM = "purpose"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JoseTokenService:
    """HS256-signed JWTs carrying a purpose claim and an expiry.

    `clock` is the time source for both issuing and expiry checks.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = JWT_ALGORITHM,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.clock = clock

    def issue(self, claims: dict[str, Any], purpose: str, ttl: timedelta) -> str:
        now = self.clock()
        payload = {
            **claims,
            PURPOSE_CLAIM: purpose,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str, purpose: str, strict: bool = False) -> dict[str, Any] | None:
        try:
            claims = self._decode(token, purpose)
        except TokenError as e:
            logger.debug(f"Token verification failed: {e}")
            if strict:
                raise
            return None
        return claims

    def _decode(self, token: str, purpose: str) -> dict[str, Any]:
        if not token:
            raise TokenError("Token is empty")
        try:
            payload = jwt.decode(
                token, self.secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except JWTError as e:
            raise TokenError(f"Invalid token: {e}") from e

        if payload.get(PURPOSE_CLAIM) != purpose:
            raise TokenError("Token was issued for another purpose")

        exp = payload.get("exp")
        if not isinstance(exp, (int, float)) or exp <= self.clock().timestamp():
            raise TokenError("Token has expired")

        return {k: v for k, v in payload.items() if k not in (PURPOSE_CLAIM, "iat", "exp")}
