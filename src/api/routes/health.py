"""Health check endpoint."""

import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from adapter.mongodb.connection import get_database, USERS_COLLECTION_NAME
from adapter.mongodb.user_store import MongoUserStore
from api.dependencies import get_signup_config
from domain.model.config import SignupConfig

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


def check_user_store(config: SignupConfig) -> dict:
    db = get_database()
    if db is None:
        return {"status": "unhealthy", "message": "Database unavailable or not configured"}
    store = MongoUserStore(db, USERS_COLLECTION_NAME, primary_key=config.primary_key.name)
    if not store.ping():
        return {"status": "unhealthy", "message": "Ping failed"}
    return {"status": "healthy", "collection": USERS_COLLECTION_NAME}


@router.get("")
async def health(config: SignupConfig = Depends(get_signup_config)):
    """Report signup settings and whether the user store answers.

    Returns 503 while the user store is unreachable.
    """
    user_store = check_user_store(config)
    healthy = user_store["status"] == "healthy"
    if not healthy:
        logger.warning("Health check degraded", extra={"userStore": user_store["message"]})

    return JSONResponse(
        content={
            "status": "healthy" if healthy else "degraded",
            "timestamp": datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            "signup": {
                "resource": config.resource.resource_id,
                "confirmEmails": config.confirmation_enabled,
            },
            "services": {"userStore": user_store},
        },
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
    )
