# domain/model/config.py

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping, Union

from domain.model.resource import AuthResource, ResourceColumn
from domain.model.signup import HookResult

if TYPE_CHECKING:
    from port.email_sender import EmailAdapter


UserSaveHook = Callable[..., Union[HookResult, Awaitable[HookResult]]]
"""Called as hook(resource=..., record=..., context=...)."""

VERIFY_EMAIL_TOKEN_PURPOSE = 'tempVerifyEmailToken'
VERIFY_EMAIL_TOKEN_HOURS = 2
TRANSLATION_NAMESPACE = 'opensignup'


@dataclass(frozen=True)
class SignupHooks:
    """Integrator-supplied callables run around user record creation."""
    before_user_save: UserSaveHook | None = None
    after_user_save: UserSaveHook | None = None


@dataclass(frozen=True)
class ConfirmEmailsOptions:
    """Settings for the email-confirmation gate."""
    adapter: EmailAdapter | None
    email_confirmed_field: str | None
    send_from: str = ''
    # Empty means any origin is accepted.
    allowed_url_origins: tuple[str, ...] = ()


@dataclass(frozen=True)
class SignupOptions:
    """Options as supplied by the integrator, before resolution."""
    email_field: str | None
    password_field: str | None
    password_hash_field: str | None
    confirm_emails: ConfirmEmailsOptions | None = None
    default_field_values: Mapping[str, Any] = field(
        default_factory=lambda: MappingProxyType({})
    )
    hooks: SignupHooks = field(default_factory=SignupHooks)

    def __post_init__(self):
        # Freeze defaults so a shared config cannot be mutated by a request.
        object.__setattr__(
            self, 'default_field_values',
            MappingProxyType(dict(self.default_field_values)),
        )


@dataclass(frozen=True)
class SignupConfig:
    """Resolved, validated configuration shared by every request."""
    options: SignupOptions
    resource: AuthResource
    email_column: ResourceColumn
    password_column: ResourceColumn
    primary_key: ResourceColumn
    brand_name: str
    email_confirmed_column: ResourceColumn | None = None

    @property
    def confirmation_enabled(self) -> bool:
        return self.options.confirm_emails is not None

    @property
    def password_hash_field(self) -> str:
        return self.options.password_hash_field

    @property
    def email_confirmed_field(self) -> str | None:
        if self.email_confirmed_column is None:
            return None
        return self.email_confirmed_column.name

    @property
    def email_adapter(self) -> EmailAdapter | None:
        if self.options.confirm_emails is None:
            return None
        return self.options.confirm_emails.adapter

    @property
    def send_from(self) -> str:
        if self.options.confirm_emails is None:
            return ''
        return self.options.confirm_emails.send_from

    @property
    def allowed_url_origins(self) -> tuple[str, ...]:
        if self.options.confirm_emails is None:
            return ()
        return self.options.confirm_emails.allowed_url_origins
