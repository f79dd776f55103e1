"""Token port: issues and verifies signed, purpose-scoped tokens."""

from datetime import timedelta
from typing import Any, Protocol


class TokenService(Protocol):
    """Port for signed tokens.

    A token issued for one purpose never verifies under another.
    Verification is stateless: no revocation list is consulted.
    """

    def issue(self, claims: dict[str, Any], purpose: str, ttl: timedelta) -> str: ...

    def verify(self, token: str, purpose: str, strict: bool = False) -> dict[str, Any] | None:
        """Return the token claims, or None if the token is invalid.

        With strict=True an invalid token raises TokenError instead.
        """
        ...
