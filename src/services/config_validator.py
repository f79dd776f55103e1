"""Config validator: resolves signup field bindings against the host schema.

Runs in two phases at startup:
- validate_config(): before schema discovery, checks that the named
  resource and fields exist and builds the immutable SignupConfig.
- validate_config_after_discover(): once column types are known, checks
  the confirmed-flag column type and the email adapter settings.

Any problem raises ConfigurationError; the application must not start.
"""

import difflib
import logging
from typing import Iterable

from domain.model.config import SignupConfig, SignupOptions
from domain.model.errors import ConfigurationError
from domain.model.resource import AuthResource, ColumnType, ResourceColumn

logger = logging.getLogger(__name__)


def suggest_if_typo(names: Iterable[str], name: str) -> str | None:
    """Return the closest existing name to `name`, if any is close enough."""
    matches = difflib.get_close_matches(name, list(names), n=1, cutoff=0.6)
    return matches[0] if matches else None


def _require_option(value: str | None, option: str, purpose: str) -> str:
    if not value:
        raise ConfigurationError(
            f"{option} is required and should be a name of {purpose} in auth resource"
        )
    return value


def _resolve_column(resource: AuthResource, name: str) -> ResourceColumn:
    column = resource.find_column(name)
    if column is None:
        similar = suggest_if_typo(resource.column_names, name)
        hint = f" Did you mean {similar}?" if similar else ""
        raise ConfigurationError(
            f"Field with name {name} not found in resource {resource.resource_id}.{hint}"
        )
    return column


def validate_config(
    options: SignupOptions,
    resources: Iterable[AuthResource],
    users_resource_id: str,
    brand_name: str,
) -> SignupConfig:
    """Resolve field bindings and build the shared SignupConfig.

    Raises:
        ConfigurationError: a required option is missing, the users resource
            does not exist, or a named field is absent from it
    """
    email_field = _require_option(options.email_field, "emailField", "field")

    resource = next((r for r in resources if r.resource_id == users_resource_id), None)
    if resource is None:
        raise ConfigurationError(
            f"Resource with id config.auth.usersResourceId={users_resource_id} not found"
        )

    email_confirmed_column = None
    if options.confirm_emails is not None:
        if options.confirm_emails.adapter is None:
            raise ConfigurationError(
                "confirmEmails.adapter is required when email confirmation is enabled"
            )
        confirmed_field = _require_option(
            options.confirm_emails.email_confirmed_field,
            "confirmEmails.emailConfirmedField", "field",
        )
        email_confirmed_column = _resolve_column(resource, confirmed_field)

    email_column = _resolve_column(resource, email_field)

    password_field = _require_option(
        options.password_field, "passwordField",
        "virtual field (used to get password constraints)",
    )
    password_column = _resolve_column(resource, password_field)

    hash_field = _require_option(options.password_hash_field, "passwordHashField", "field")
    _resolve_column(resource, hash_field)

    primary_key = resource.primary_key
    if primary_key is None:
        raise ConfigurationError(f"Resource {resource.resource_id} has no primary key column")

    logger.info("Signup configuration resolved", extra={
        "resourceId": resource.resource_id,
        "emailField": email_column.name,
        "confirmEmails": options.confirm_emails is not None,
    })

    return SignupConfig(
        options=options,
        resource=resource,
        email_column=email_column,
        password_column=password_column,
        primary_key=primary_key,
        brand_name=brand_name,
        email_confirmed_column=email_confirmed_column,
    )


def validate_config_after_discover(
    config: SignupConfig,
    discovered: AuthResource | None = None,
) -> None:
    """Check settings that need discovered column types.

    `discovered` is the users resource as returned by schema discovery;
    defaults to the resource the config was built from.

    Raises:
        ConfigurationError: the email adapter is misconfigured, or the
            confirmed-flag column is not boolean
    """
    if not config.confirmation_enabled:
        return

    config.email_adapter.validate()

    resource = discovered or config.resource
    column = resource.find_column(config.email_confirmed_field)
    if column is None or column.type != ColumnType.BOOLEAN:
        raise ConfigurationError(
            f"Field {config.email_confirmed_field} must be of type boolean"
        )
