"""Signup routes (password constraints, signup, email confirmation).

All business outcomes are returned with 200 and a JSON body so the
signup page can render them; only unexpected failures produce 5xx.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response

from api import settings
from api.dependencies import (
    get_session_service,
    get_signup_config,
    get_token_service,
    get_translator,
    get_user_store,
)
from api.models import (
    CompleteVerifiedSignupRequest,
    PasswordConstraintsResponse,
    PasswordRuleResponse,
    SignupRequest,
    SignupSettingsResponse,
)
from domain.model.config import SignupConfig
from domain.model.signup import RequestContext
from port.session_service import SessionService
from port.token_service import TokenService
from port.translator import Translator
from port.user_store import UserStore
from services import confirmation_service, signup_service
from services.password_policy import get_password_constraints

logger = logging.getLogger(__name__)

router = APIRouter(prefix=settings.SIGNUP_ROUTE_PREFIX, tags=["signup"])


def _request_context(request: Request, body: dict, request_url: str | None) -> RequestContext:
    return RequestContext(
        body=body,
        headers=dict(request.headers),
        query=dict(request.query_params),
        cookies=dict(request.cookies),
        request_url=request_url,
    )


@router.get("/password-constraints", response_model=PasswordConstraintsResponse)
async def password_constraints(
    config: SignupConfig = Depends(get_signup_config),
    translator: Translator = Depends(get_translator),
):
    """Password policy the signup form should enforce client-side."""
    constraints = get_password_constraints(config, translator)
    return PasswordConstraintsResponse(
        minLength=constraints.min_length,
        maxLength=constraints.max_length,
        validation=[
            PasswordRuleResponse(regExp=rule.pattern, message=rule.message)
            for rule in constraints.validation
        ],
    )


@router.get("/signup-settings", response_model=SignupSettingsResponse)
async def signup_settings(config: SignupConfig = Depends(get_signup_config)):
    return SignupSettingsResponse(requestEmailConfirmation=config.confirmation_enabled)


@router.post("/signup")
async def signup(
    body: SignupRequest,
    request: Request,
    response: Response,
    config: SignupConfig = Depends(get_signup_config),
    store: UserStore = Depends(get_user_store),
    tokens: TokenService = Depends(get_token_service),
    sessions: SessionService = Depends(get_session_service),
    translator: Translator = Depends(get_translator),
):
    """Create an account, then log in or send the confirmation email.

    Returns:
        {ok: true} when a confirmation email was sent, a login result when
        the user was logged in, or {error, ok: false}
    """
    # Passwords never go into the context handed to hooks and callbacks.
    context = _request_context(request, body.model_dump(exclude={'password'}), body.url)
    result = await signup_service.signup(
        body.email, body.password, body.url, context,
        config=config, store=store, tokens=tokens,
        sessions=sessions, translator=translator, response=response,
    )
    return result.to_dict()


@router.post("/complete-verified-signup")
async def complete_verified_signup(
    body: CompleteVerifiedSignupRequest,
    request: Request,
    response: Response,
    config: SignupConfig = Depends(get_signup_config),
    store: UserStore = Depends(get_user_store),
    tokens: TokenService = Depends(get_token_service),
    sessions: SessionService = Depends(get_session_service),
    translator: Translator = Depends(get_translator),
):
    """Confirm the email behind a verification token and set the password."""
    context = _request_context(request, {}, str(request.url))
    result = await confirmation_service.complete_verified_signup(
        body.token, body.password, context,
        config=config, store=store, tokens=tokens,
        sessions=sessions, translator=translator, response=response,
    )
    return result.to_dict()
