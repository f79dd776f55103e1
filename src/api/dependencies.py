from functools import lru_cache

from fastapi import HTTPException
from pymongo.database import Database

from adapter.mongodb.connection import get_database, USERS_COLLECTION_NAME
from adapter.mongodb.user_store import MongoUserStore
from api import bootstrap
from domain.model.config import SignupConfig
from port.session_service import SessionService
from port.token_service import TokenService
from port.translator import Translator
from port.user_store import UserStore


def _get_db() -> Database:
    """Get MongoDB database, raising 503 if unavailable."""
    db = get_database()
    if db is None:
        raise HTTPException(status_code=503, detail="Database unavailable")
    return db


@lru_cache(maxsize=1)
def get_signup_config() -> SignupConfig:
    return bootstrap.build_signup_config()


@lru_cache(maxsize=1)
def get_token_service() -> TokenService:
    return bootstrap.build_token_service()


@lru_cache(maxsize=1)
def get_translator() -> Translator:
    return bootstrap.build_translator()


@lru_cache(maxsize=1)
def get_session_service() -> SessionService:
    return bootstrap.build_session_service(
        get_signup_config(), get_token_service(), get_translator(),
    )


def get_user_store() -> UserStore:
    config = get_signup_config()
    return MongoUserStore(
        _get_db(),
        collection_name=USERS_COLLECTION_NAME,
        primary_key=config.primary_key.name,
        email_field=config.email_column.name,
    )
