"""Pydantic models for API request/response."""

from typing import Optional
from pydantic import BaseModel, Field


class SignupRequest(BaseModel):
    """Request model for self-service signup."""
    email: str = ""
    url: Optional[str] = Field(None, description="Page the confirmation link points to")
    password: Optional[str] = None


class CompleteVerifiedSignupRequest(BaseModel):
    """Request model for finishing a confirmation-gated signup."""
    token: Optional[str] = None
    password: Optional[str] = None


class PasswordRuleResponse(BaseModel):
    regExp: str
    message: str


class PasswordConstraintsResponse(BaseModel):
    """Password policy of the users resource."""
    minLength: Optional[int] = None
    maxLength: Optional[int] = None
    validation: list[PasswordRuleResponse] = Field(default_factory=list)


class SignupSettingsResponse(BaseModel):
    """Settings the signup page needs to render."""
    requestEmailConfirmation: bool
