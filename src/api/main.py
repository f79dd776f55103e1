"""FastAPI application entry point."""

import os
import sys
import logging
import tomllib
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

# Must run before importing modules that read env vars (api.settings)
load_dotenv()

# main.py is at src/api/main.py
_src_path = Path(__file__).parent.parent
sys.path.insert(0, str(_src_path))

from api import settings
from api.dependencies import get_signup_config
from api.routes import health, signup
from adapter.mongodb.connection import get_database, USERS_COLLECTION_NAME
from adapter.mongodb.user_store import MongoUserStore
from domain.model.errors import HookContractError
from utils.logging import setup_structured_logging

setup_structured_logging(service=settings.SERVICE_NAME)

logger = logging.getLogger(__name__)

# pyproject.toml is the single source of truth for the version
_project_root = _src_path.parent
with open(_project_root / "pyproject.toml", "rb") as f:
    VERSION = tomllib.load(f)["project"]["version"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: validate configuration, then prepare the store."""
    # Raises ConfigurationError and aborts startup on a bad configuration
    config = get_signup_config()
    logger.info("Signup plugin initialized", extra={
        "resourceId": config.resource.resource_id,
        "confirmEmails": config.confirmation_enabled,
    })

    db = get_database()
    if db is not None:
        store = MongoUserStore(
            db,
            collection_name=USERS_COLLECTION_NAME,
            primary_key=config.primary_key.name,
            email_field=config.email_column.name,
        )
        if store.ensure_indexes():
            logger.info("MongoDB indexes verified/created successfully")
        else:
            logger.warning("Failed to create some MongoDB indexes")
    else:
        logger.warning("MongoDB unavailable, skipping index creation")

    yield

    adapter = config.email_adapter
    if adapter is not None and hasattr(adapter, 'shutdown'):
        adapter.shutdown()


app = FastAPI(
    title=settings.SERVICE_NAME,
    description="Self-service signup with optional email confirmation",
    version=VERSION,
    lifespan=lifespan,
)


@app.exception_handler(HookContractError)
async def hook_contract_error_handler(request: Request, exc: HookContractError):
    logger.error("Lifecycle hook broke its contract", extra={
        "path": request.url.path, "error": str(exc),
    })
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def cors_settings(raw: str) -> tuple[list[str], bool]:
    """Parse CORS_ORIGINS into (origins, allow_credentials).

    Credentials are only allowed with explicit origins, so the session
    cookie is never sent cross-site under a wildcard.
    """
    if raw.strip() == "*":
        logger.warning("CORS_ORIGINS is '*'; session cookies will not be sent cross-origin")
        return ["*"], False
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    logger.info("CORS configured", extra={"origins": origins})
    return origins, True


cors_origins, allow_credentials = cors_settings(settings.CORS_ORIGINS)
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(signup.router)
app.include_router(health.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": settings.SERVICE_NAME,
        "version": VERSION,
        "status": "running"
    }


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=port,
        access_log=False
    )
