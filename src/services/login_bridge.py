"""Login bridge: logs a freshly created or confirmed user in."""

import logging
from typing import Any

from domain.model.config import TRANSLATION_NAMESPACE, SignupConfig
from domain.model.errors import DomainError
from domain.model.signup import LoginResult, RequestContext
from domain.model.user import Identity
from port.session_service import LoginCallback, SessionService
from port.translator import Translator
from port.user_store import UserStore

logger = logging.getLogger(__name__)


async def do_login(
    email: str,
    response: Any,
    context: RequestContext,
    *,
    config: SignupConfig,
    store: UserStore,
    sessions: SessionService,
) -> LoginResult:
    """Run login callbacks for `email` and establish a session if allowed.

    Raises:
        DomainError: no record exists for `email` (callers have just
            created or confirmed it, so this is not a business outcome)
    """
    record = store.get(config.email_column.name, email)
    if record is None:
        raise DomainError(f"User record for login not found in {config.resource.resource_id}")

    identity = Identity(pk=record[config.primary_key.name], username=email, record=record)
    result = LoginResult(allowed_login=True, error='')

    await sessions.run_login_callbacks(identity, result, response, context)
    if result.allowed_login:
        sessions.establish_session(identity, response)
        logger.info("User logged in after signup", extra={"userId": identity.pk})
    else:
        logger.info("Login after signup denied", extra={"userId": identity.pk})

    return result


def reject_unconfirmed_email(config: SignupConfig, translator: Translator) -> LoginCallback:
    """Build a login callback that denies users whose email is not confirmed."""
    field = config.email_confirmed_field

    async def reject_unconfirmed(
        identity: Identity,
        result: LoginResult,
        response: Any,
        context: RequestContext,
    ) -> None:
        if field and not identity.record.get(field):
            result.allowed_login = False
            result.error = translator.translate("Email is not confirmed", TRANSLATION_NAMESPACE)

    return reject_unconfirmed
