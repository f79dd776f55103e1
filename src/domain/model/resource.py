"""Host schema model: the authentication resource and its columns."""

import re
from dataclasses import dataclass, field
from enum import Enum


class ColumnType(str, Enum):
    """Data types a resource column can declare."""
    STRING = 'string'
    TEXT = 'text'
    INTEGER = 'integer'
    BOOLEAN = 'boolean'
    DATETIME = 'datetime'


@dataclass(frozen=True)
class ValidationRule:
    """Regex rule with the message shown when a value does not match."""
    pattern: str
    message: str

    def matches(self, value: str) -> bool:
        return re.search(self.pattern, value) is not None


@dataclass(frozen=True)
class ResourceColumn:
    """A named attribute of a resource.

    `type` stays None until the host finishes schema discovery.
    """
    name: str
    type: ColumnType | None = None
    primary_key: bool = False
    min_length: int | None = None
    max_length: int | None = None
    validation: tuple[ValidationRule, ...] = ()
    virtual: bool = False


@dataclass(frozen=True)
class AuthResource:
    """Resource that holds user accounts."""
    resource_id: str
    columns: tuple[ResourceColumn, ...] = field(default_factory=tuple)

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]

    def find_column(self, name: str) -> ResourceColumn | None:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    @property
    def primary_key(self) -> ResourceColumn | None:
        for column in self.columns:
            if column.primary_key:
                return column
        return None
