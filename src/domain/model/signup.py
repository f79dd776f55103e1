"""Signup workflow value objects: request context and per-request results."""

from dataclasses import dataclass, field
from typing import Any

from domain.model.user import UserRecord


@dataclass(frozen=True)
class RequestContext:
    """Fixed-field view of the incoming HTTP request.

    Passed unchanged through signup, confirmation, hooks and login callbacks.
    """
    body: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    query: dict[str, str] = field(default_factory=dict)
    cookies: dict[str, str] = field(default_factory=dict)
    request_url: str | None = None


@dataclass
class HookResult:
    """Value every lifecycle hook must return.

    `ok=True` lets the signup continue (optionally with a replacement
    `record`); an `error` vetoes it.
    """
    ok: bool = False
    error: str | None = None
    record: UserRecord | None = None

    @property
    def is_well_formed(self) -> bool:
        return self.ok or bool(self.error)


@dataclass
class LoginResult:
    """Outcome of a login attempt. Login callbacks mutate it in place."""
    allowed_login: bool = True
    error: str = ''
    redirect_to: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {'allowedLogin': self.allowed_login}
        if self.error:
            data['error'] = self.error
        if self.redirect_to:
            data['redirectTo'] = self.redirect_to
        return data


@dataclass(frozen=True)
class SignupResult:
    """Non-login outcome of a signup or confirmation request."""
    ok: bool | None = None
    error: str | None = None

    @classmethod
    def success(cls) -> 'SignupResult':
        return cls(ok=True)

    @classmethod
    def failure(cls, error: str) -> 'SignupResult':
        return cls(ok=False, error=error)

    @classmethod
    def hook_error(cls, error: str) -> 'SignupResult':
        """Error reported by a lifecycle hook, passed through as-is."""
        return cls(error=error)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.error is not None:
            data['error'] = self.error
        if self.ok is not None:
            data['ok'] = self.ok
        return data
