"""Signup service: self-service account creation.

Flow: validate email → validate password (unless confirmation is on) →
duplicate check → before hook → create → after hook →
log in, or send the confirmation email.

Business-rule failures are returned as SignupResult, never raised.
Only hook contract violations and store/token failures propagate.
"""

import inspect
import logging
from collections.abc import Mapping
from typing import Any

from domain.model.config import TRANSLATION_NAMESPACE, SignupConfig, UserSaveHook
from domain.model.errors import DuplicateError, HookContractError
from domain.model.signup import HookResult, LoginResult, RequestContext, SignupResult
from domain.model.user import UserRecord
from port.session_service import SessionService
from port.token_service import TokenService
from port.translator import Translator
from port.user_store import UserStore
from services.confirmation_service import is_allowed_confirmation_url, issue_confirmation
from services.login_bridge import do_login
from services.password_policy import check_password
from utils.passwords import hash_password

logger = logging.getLogger(__name__)


async def signup(
    email: str,
    password: str | None,
    url: str | None,
    context: RequestContext,
    *,
    config: SignupConfig,
    store: UserStore,
    tokens: TokenService,
    sessions: SessionService,
    translator: Translator,
    response: Any = None,
) -> SignupResult | LoginResult:
    """Create an account for `email`.

    Returns a LoginResult when the user is logged in right away, otherwise
    a SignupResult ({ok: True} once the confirmation email is sent, or an error).

    Raises:
        HookContractError: a lifecycle hook returned a malformed result
    """

    def fail(message: str, **variables: object) -> SignupResult:
        return SignupResult.failure(
            translator.translate(message, TRANSLATION_NAMESPACE, variables or None)
        )

    email = email or ''
    error = _check_email(email, config, translator)
    if error:
        return SignupResult.failure(error)

    if not config.confirmation_enabled:
        if not password:
            return fail('Password is required')
        error = check_password(password, config, translator)
        if error:
            return SignupResult.failure(error)
    elif not url:
        return fail('Confirmation URL is required')
    elif not is_allowed_confirmation_url(url, config.allowed_url_origins):
        logger.warning("Signup rejected: confirmation url not allowed", extra={"url": url[:200]})
        return fail('Confirmation URL is not allowed')

    # Field validators should already reject mixed case; normalize anyway.
    normalized_email = email.lower()

    existing = store.get(config.email_column.name, normalized_email)
    if _is_conflict(existing, config):
        logger.info("Signup rejected: email exists", extra={"email": normalized_email})
        return fail('Email already exists')

    if existing is None:
        record = _build_record(normalized_email, password, config)

        before = await _run_hook(
            'before_user_save', config.options.hooks.before_user_save,
            config, record, context,
        )
        if before is not None:
            if before.error:
                return SignupResult.hook_error(before.error)
            record = before.record or record

        record = _without_virtual_fields(record, config)

        try:
            created = store.create(record)
        except DuplicateError:
            # Lost the race against a concurrent signup for the same email.
            return fail('Email already exists')
        logger.info("User signed up", extra={
            "userId": created.get(config.primary_key.name),
            "confirmation": config.confirmation_enabled,
        })

        after = await _run_hook(
            'after_user_save', config.options.hooks.after_user_save,
            config, created, context,
        )
        if after is not None and after.error:
            # The record stays in the store; it is not rolled back.
            logger.warning("after_user_save rejected a created user", extra={
                "userId": created.get(config.primary_key.name),
                "error": after.error,
            })
            return SignupResult.hook_error(after.error)

    if not config.confirmation_enabled:
        return await do_login(
            normalized_email, response, context,
            config=config, store=store, sessions=sessions,
        )

    return issue_confirmation(
        normalized_email, url,
        config=config, tokens=tokens, translator=translator,
    )


def _check_email(email: str, config: SignupConfig, translator: Translator) -> str | None:
    """Return a localized error for the first email-field violation, or None."""
    column = config.email_column
    if column.min_length is not None and len(email) < column.min_length:
        return translator.translate(
            "Email must be at least {minLength} characters long",
            TRANSLATION_NAMESPACE, {"minLength": column.min_length},
        )
    if column.max_length is not None and len(email) > column.max_length:
        return translator.translate(
            "Email must be at most {maxLength} characters long",
            TRANSLATION_NAMESPACE, {"maxLength": column.max_length},
        )
    for rule in column.validation:
        if not rule.matches(email):
            return translator.translate(rule.message, TRANSLATION_NAMESPACE)
    return None


def _without_virtual_fields(record: UserRecord, config: SignupConfig) -> UserRecord:
    """Drop columns that are never persisted, such as the plain password."""
    virtual = {c.name for c in config.resource.columns if c.virtual}
    return {k: v for k, v in record.items() if k not in virtual}


def _is_conflict(existing: UserRecord | None, config: SignupConfig) -> bool:
    """An unconfirmed record in confirmation mode is not a conflict: it allows re-sending."""
    if existing is None:
        return False
    if not config.confirmation_enabled:
        return True
    return bool(existing.get(config.email_confirmed_field))


def _build_record(email: str, password: str | None, config: SignupConfig) -> UserRecord:
    record: UserRecord = dict(config.options.default_field_values)
    if config.confirmation_enabled:
        record[config.email_confirmed_field] = False
    record[config.email_column.name] = email
    record[config.password_hash_field] = hash_password(password) if password else ''
    return record


async def _run_hook(
    name: str,
    hook: UserSaveHook | None,
    config: SignupConfig,
    record: UserRecord,
    context: RequestContext,
) -> HookResult | None:
    """Run a lifecycle hook and check its result. Returns None if no hook is set."""
    if hook is None:
        return None

    result = hook(resource=config.resource, record=record, context=context)
    if inspect.isawaitable(result):
        result = await result

    if isinstance(result, Mapping):
        result = HookResult(
            ok=bool(result.get('ok')),
            error=result.get('error'),
            record=result.get('record'),
        )
    if not isinstance(result, HookResult) or not result.is_well_formed:
        raise HookContractError(
            f"Hook {name} must return HookResult(ok=True) or HookResult(error='Error')"
        )
    return result
