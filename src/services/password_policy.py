"""Password policy: the password constraints shown to and enforced on signup."""

from dataclasses import dataclass

from domain.model.config import TRANSLATION_NAMESPACE, SignupConfig
from port.translator import Translator


@dataclass(frozen=True)
class LocalizedRule:
    pattern: str
    message: str


@dataclass(frozen=True)
class PasswordConstraints:
    min_length: int | None
    max_length: int | None
    validation: tuple[LocalizedRule, ...]


def get_password_constraints(config: SignupConfig, translator: Translator) -> PasswordConstraints:
    """Read the password field's declared constraints with localized messages."""
    column = config.password_column
    return PasswordConstraints(
        min_length=column.min_length,
        max_length=column.max_length,
        validation=tuple(
            LocalizedRule(
                pattern=rule.pattern,
                message=translator.translate(rule.message, TRANSLATION_NAMESPACE),
            )
            for rule in column.validation
        ),
    )


def check_password(
    password: str,
    config: SignupConfig,
    translator: Translator,
) -> str | None:
    """Return a localized error for the first policy violation, or None."""
    column = config.password_column
    if column.min_length is not None and len(password) < column.min_length:
        return translator.translate(
            "Password must be at least {minLength} characters long",
            TRANSLATION_NAMESPACE, {"minLength": column.min_length},
        )
    if column.max_length is not None and len(password) > column.max_length:
        return translator.translate(
            "Password must be at most {maxLength} characters long",
            TRANSLATION_NAMESPACE, {"maxLength": column.max_length},
        )
    for rule in column.validation:
        if not rule.matches(password):
            return translator.translate(rule.message, TRANSLATION_NAMESPACE)
    return None
