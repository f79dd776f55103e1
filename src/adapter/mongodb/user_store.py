"""MongoDB implementation of UserStore."""

import uuid
from logging import getLogger
from typing import Any, Mapping

from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from adapter.mongodb.connection import USERS_COLLECTION_NAME
from domain.model.errors import DuplicateError
from domain.model.user import UserRecord

logger = getLogger(__name__)


class MongoUserStore:
    """User records in a MongoDB collection.

    The resource's primary key column is stored as the document `_id`.
    """

    def __init__(
        self,
        db: Database,
        collection_name: str = USERS_COLLECTION_NAME,
        primary_key: str = 'id',
        email_field: str = 'email',
    ):
        self.collection = db[collection_name]
        self.primary_key = primary_key
        self.email_field = email_field

    def ensure_indexes(self) -> bool:
        """Create the unique email index.

        This index is what keeps two concurrent signups for one email from
        both succeeding.
        """
        try:
            self.collection.create_index(
                [(self.email_field, 1)], name=f'idx_users_{self.email_field}', unique=True,
            )
            return True
        except PyMongoError as e:
            logger.error("Failed to create users indexes", extra={"error": str(e)})
            return False

    def _query_field(self, field: str) -> str:
        return '_id' if field == self.primary_key else field

    def _to_record(self, doc: dict) -> UserRecord:
        record = {k: v for k, v in doc.items() if k != '_id'}
        record[self.primary_key] = doc['_id']
        return record

    def create(self, record: UserRecord) -> UserRecord:
        doc = dict(record)
        pk = doc.pop(self.primary_key, None) or uuid.uuid4().hex
        doc['_id'] = pk
        try:
            self.collection.insert_one(doc)
        except DuplicateKeyError as e:
            logger.warning("User creation failed: duplicate key", extra={"userId": pk})
            raise DuplicateError("User already exists") from e
        except PyMongoError as e:
            logger.error("Failed to create user", extra={"userId": pk, "error": str(e)})
            raise

        logger.info("User created", extra={"userId": pk})
        return self._to_record(doc)

    def get(self, field: str, value: Any) -> UserRecord | None:
        try:
            doc = self.collection.find_one({self._query_field(field): value})
        except PyMongoError as e:
            logger.error("Failed to get user", extra={"field": field, "error": str(e)})
            raise
        return self._to_record(doc) if doc else None

    def update(
        self,
        pk: Any,
        changes: Mapping[str, Any],
        expected: Mapping[str, Any] | None = None,
    ) -> bool:
        query = {'_id': pk}
        for key, value in (expected or {}).items():
            query[self._query_field(key)] = value
        try:
            result = self.collection.update_one(query, {'$set': dict(changes)})
        except PyMongoError as e:
            logger.error("Failed to update user", extra={"userId": pk, "error": str(e)})
            raise
        if result.matched_count == 0:
            logger.debug("No user matched update", extra={"userId": pk})
            return False
        return True

    def ping(self) -> bool:
        try:
            self.collection.database.client.admin.command('ping')
            return True
        except PyMongoError:
            return False
