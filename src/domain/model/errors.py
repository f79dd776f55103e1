"""Domain-level exceptions.

Business-rule failures of the signup workflow are returned to callers as
data. Only configuration problems, broken hook contracts, store conflicts
and strict token checks are raised.
"""


class DomainError(Exception):
    """Base class for all domain errors."""


class ConfigurationError(DomainError):
    """Plugin configuration is incompatible with the host schema.

    Raised at startup; the application must not serve requests.
    """


class HookContractError(DomainError):
    """A lifecycle hook returned something other than a HookResult."""


class DuplicateError(DomainError):
    """Entity with the same unique key already exists."""


class TokenError(DomainError):
    """Token is malformed, expired, or issued for another purpose."""
