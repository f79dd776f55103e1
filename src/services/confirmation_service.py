"""Confirmation service: email-ownership tokens for gated signups.

Flow: signup issues a purpose-scoped token and mails a link with it →
the user opens the link and chooses a password → complete_verified_signup()
verifies the token, marks the record confirmed and logs the user in.
"""

import html
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any
from urllib.parse import urlsplit

from domain.model.config import (
    TRANSLATION_NAMESPACE,
    VERIFY_EMAIL_TOKEN_HOURS,
    VERIFY_EMAIL_TOKEN_PURPOSE,
    SignupConfig,
)
from domain.model.signup import LoginResult, RequestContext, SignupResult
from port.session_service import SessionService
from port.token_service import TokenService
from port.translator import Translator
from port.user_store import UserStore
from services.login_bridge import do_login
from services.password_policy import check_password
from utils.passwords import hash_password

logger = logging.getLogger(__name__)

VERIFY_EMAIL_TOKEN_TTL = timedelta(hours=VERIFY_EMAIL_TOKEN_HOURS)

EMAIL_TEXT_TEMPLATE = """Dear user,
Welcome to {brandName}!

To confirm your email, click the link below:

{link}

If you didn't request this, please ignore this email.
Link is valid for 2 hours.

Thanks,
The {brandName} Team
"""


@dataclass(frozen=True)
class ConfirmationEmail:
    subject: str
    text: str
    html: str


def is_allowed_confirmation_url(url: str, allowed_origins: tuple[str, ...]) -> bool:
    """Whether `url` is an absolute http(s) URL on one of `allowed_origins`.

    An empty allowlist accepts any url.
    """
    if not allowed_origins:
        return True
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return False
    return f"{parts.scheme}://{parts.netloc}".lower() in allowed_origins


def build_confirmation_link(url: str, token: str) -> str:
    separator = '&' if '?' in url else '?'
    return f"{url}{separator}token={token}"


def render_confirmation_email(
    url: str,
    token: str,
    brand_name: str,
    translator: Translator,
) -> ConfirmationEmail:
    """Render the localized subject, plain text and HTML bodies."""

    def tr(text: str, **variables: object) -> str:
        return translator.translate(text, TRANSLATION_NAMESPACE, variables or None)

    link = build_confirmation_link(url, token)
    text = tr(EMAIL_TEXT_TEMPLATE, brandName=brand_name, link=link)

    paragraphs = [
        tr('Dear user,'),
        tr('Welcome to {brandName}!', brandName=brand_name),
        tr('To confirm your email, click the link below:'),
    ]
    closing = [
        tr("If you didn't request this, please ignore this email."),
        tr('Link is valid for 2 hours.'),
        tr('Thanks,'),
        tr('The {brandName} Team', brandName=brand_name),
    ]
    body = "\n".join(f"<p>{html.escape(p)}</p>" for p in paragraphs)
    body += f'\n<a href="{html.escape(link, quote=True)}">{html.escape(tr("Confirm email"))}</a>\n'
    body += "\n".join(f"<p>{html.escape(p)}</p>" for p in closing)

    return ConfirmationEmail(
        subject=tr('Signup request at {brandName}', brandName=brand_name),
        text=text,
        html=f"<html>\n<head></head>\n<body>\n{body}\n</body>\n</html>\n",
    )


def issue_confirmation(
    email: str,
    url: str,
    *,
    config: SignupConfig,
    tokens: TokenService,
    translator: Translator,
) -> SignupResult:
    """Issue a verification token for `email` and mail the confirmation link.

    Delivery is fire-and-forget; failures are handled by the email adapter.
    """
    token = tokens.issue(
        {"email": email, "issuer": config.brand_name},
        VERIFY_EMAIL_TOKEN_PURPOSE,
        VERIFY_EMAIL_TOKEN_TTL,
    )
    message = render_confirmation_email(url, token, config.brand_name, translator)

    config.email_adapter.send_email(
        config.send_from, email, message.text, message.html, message.subject,
    )
    logger.info("Confirmation email dispatched", extra={"email": email})
    return SignupResult.success()


async def complete_verified_signup(
    token: str | None,
    password: str | None,
    context: RequestContext,
    *,
    config: SignupConfig,
    store: UserStore,
    tokens: TokenService,
    sessions: SessionService,
    translator: Translator,
    response: Any = None,
) -> LoginResult | SignupResult:
    """Confirm the email behind `token`, set the password and log in."""

    def fail(message: str) -> SignupResult:
        return SignupResult.failure(translator.translate(message, TRANSLATION_NAMESPACE))

    if not config.confirmation_enabled:
        return fail('Email confirmation is not enabled')

    claims = tokens.verify(token or '', VERIFY_EMAIL_TOKEN_PURPOSE, strict=False)
    email = claims.get("email") if claims else None
    if not email:
        return fail('Invalid token')

    if not password:
        return fail('Password is required')
    # Policy checks skipped at signup in confirmation mode run here.
    error = check_password(password, config, translator)
    if error:
        return SignupResult.failure(error)

    record = store.get(config.email_column.name, email)
    if record is None:
        return fail('User not found')

    confirmed_field = config.email_confirmed_field
    if record.get(confirmed_field):
        return fail('Email already confirmed')

    # Conditional on the flag still being false, so a replayed token racing
    # this request cannot set the password a second time.
    updated = store.update(
        record[config.primary_key.name],
        {confirmed_field: True, config.password_hash_field: hash_password(password)},
        expected={confirmed_field: record.get(confirmed_field)},
    )
    if not updated:
        return fail('Email already confirmed')

    logger.info("Email confirmed", extra={"userId": record[config.primary_key.name]})

    return await do_login(
        email, response, context,
        config=config, store=store, sessions=sessions,
    )
