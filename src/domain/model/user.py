from dataclasses import dataclass, field
from typing import Any

UserRecord = dict[str, Any]
"""User record as stored by the record store: column name -> value."""


@dataclass
class Identity:
    """Domain model representing the user being logged in."""
    pk: Any
    username: str
    record: UserRecord = field(default_factory=dict)
