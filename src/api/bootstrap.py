"""Application wiring: builds the users schema, options and adapters.

Everything here runs once per process; api.dependencies caches the results.
"""

import logging
from datetime import timedelta

from adapter.i18n.catalog_translator import CatalogTranslator
from adapter.jose.token_service import JoseTokenService
from adapter.mail.smtp import SmtpEmailAdapter
from adapter.session.cookie_session import CookieSessionService
from api import settings
from domain.model.config import ConfirmEmailsOptions, SignupConfig, SignupHooks, SignupOptions
from domain.model.resource import AuthResource, ColumnType, ResourceColumn, ValidationRule
from port.email_sender import EmailAdapter
from port.token_service import TokenService
from port.translator import Translator
from services.config_validator import validate_config, validate_config_after_discover
from services.login_bridge import reject_unconfirmed_email

logger = logging.getLogger(__name__)

EMAIL_REGEX = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"


def build_users_resource() -> AuthResource:
    """Schema of the users resource served by this application."""
    return AuthResource(
        resource_id=settings.USERS_RESOURCE_ID,
        columns=(
            ResourceColumn('id', ColumnType.STRING, primary_key=True),
            ResourceColumn(
                'email', ColumnType.STRING, max_length=255,
                validation=(ValidationRule(
                    EMAIL_REGEX, 'Email is not valid, must be in format example@test.com',
                ),),
            ),
            ResourceColumn(
                'password', ColumnType.STRING, virtual=True,
                min_length=settings.PASSWORD_MIN_LENGTH,
                max_length=settings.PASSWORD_MAX_LENGTH,
                validation=(
                    ValidationRule(r'[a-zA-Z]', 'Password must contain at least one letter'),
                    ValidationRule(r'[0-9]', 'Password must contain at least one number'),
                ),
            ),
            ResourceColumn('password_hash', ColumnType.STRING),
            ResourceColumn('email_confirmed', ColumnType.BOOLEAN),
            ResourceColumn('role', ColumnType.STRING),
        ),
    )


def build_email_adapter() -> EmailAdapter:
    return SmtpEmailAdapter(
        host=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.SMTP_USERNAME,
        password=settings.SMTP_PASSWORD,
        use_tls=settings.SMTP_USE_TLS,
    )


def build_signup_options(
    email_adapter: EmailAdapter | None = None,
    hooks: SignupHooks | None = None,
) -> SignupOptions:
    confirm_emails = None
    if settings.SIGNUP_CONFIRM_EMAILS:
        confirm_emails = ConfirmEmailsOptions(
            adapter=email_adapter or build_email_adapter(),
            email_confirmed_field='email_confirmed',
            send_from=settings.SIGNUP_SEND_FROM,
            allowed_url_origins=settings.SIGNUP_ALLOWED_URL_ORIGINS,
        )
    return SignupOptions(
        email_field='email',
        password_field='password',
        password_hash_field='password_hash',
        confirm_emails=confirm_emails,
        default_field_values={'role': 'user'},
        hooks=hooks or SignupHooks(),
    )


def build_signup_config(options: SignupOptions | None = None) -> SignupConfig:
    """Resolve and validate the signup configuration (both phases).

    Raises:
        ConfigurationError: the options do not fit the users resource
    """
    resource = build_users_resource()
    config = validate_config(
        options or build_signup_options(),
        [resource],
        settings.USERS_RESOURCE_ID,
        settings.BRAND_NAME,
    )
    validate_config_after_discover(config, resource)
    return config


def build_token_service() -> TokenService:
    return JoseTokenService(settings.JWT_SECRET_KEY)


def build_translator() -> Translator:
    return CatalogTranslator()


def build_session_service(
    config: SignupConfig,
    tokens: TokenService,
    translator: Translator,
) -> CookieSessionService:
    sessions = CookieSessionService(
        tokens,
        cookie_name=settings.SESSION_COOKIE_NAME,
        expiration=timedelta(days=settings.SESSION_EXPIRATION_DAYS),
        secure=settings.SESSION_COOKIE_SECURE,
    )
    if config.confirmation_enabled:
        sessions.add_login_callback(reject_unconfirmed_email(config, translator))
    return sessions
