"""In-memory implementation of UserStore for testing."""

import copy
import uuid
from typing import Any, Mapping

from domain.model.user import UserRecord


class FakeUserStore:
    def __init__(self, primary_key: str = 'id'):
        self.primary_key = primary_key
        self.store: dict[Any, UserRecord] = {}

    # ── write operations ─────────────────────────────────────

    def create(self, record: UserRecord) -> UserRecord:
        doc = dict(record)
        if doc.get(self.primary_key) is None:
            doc[self.primary_key] = uuid.uuid4().hex
        self.store[doc[self.primary_key]] = doc
        return copy.deepcopy(doc)

    def update(
        self,
        pk: Any,
        changes: Mapping[str, Any],
        expected: Mapping[str, Any] | None = None,
    ) -> bool:
        doc = self.store.get(pk)
        if doc is None:
            return False
        if expected and any(doc.get(k) != v for k, v in expected.items()):
            return False
        doc.update(changes)
        return True

    # ── read operations ──────────────────────────────────────

    def get(self, field: str, value: Any) -> UserRecord | None:
        for doc in self.store.values():
            if doc.get(field) == value:
                return copy.deepcopy(doc)
        return None

    def ping(self) -> bool:
        return True
