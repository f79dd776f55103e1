from typing import Any, Mapping, Protocol

from domain.model.user import UserRecord


class UserStore(Protocol):
    """Protocol defining the interface for user record access.

    Records are plain dicts keyed by column name. The primary key column is
    fixed per store instance.
    """
    def get(self, field: str, value: Any) -> UserRecord | None:
        """Find the first record whose `field` equals `value`. Return None if not found."""
        ...

    def create(self, record: UserRecord) -> UserRecord:
        """Insert a record and return it with its primary key populated."""
        ...

    def update(
        self,
        pk: Any,
        changes: Mapping[str, Any],
        expected: Mapping[str, Any] | None = None,
    ) -> bool:
        """Apply `changes` to the record with primary key `pk`.

        When `expected` is given, the update only applies if the stored
        record currently holds those values. Return True if a record was updated.
        """
        ...

    def ping(self) -> bool: ...
