"""Environment configuration.

Values are read once at import; api.main loads `.env` before importing this.
"""

import os

APP_ENV = os.getenv("APP_ENV", "dev")
SERVICE_NAME = "Open Signup API"

# JWT signing key for verification tokens and session cookies
DEV_JWT_SECRET_KEY = "dev-secret"
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", DEV_JWT_SECRET_KEY)

if APP_ENV == "production" and JWT_SECRET_KEY == DEV_JWT_SECRET_KEY:
    raise ValueError(
        "JWT_SECRET_KEY must be changed from the default in production. "
        "Generate a secure key with: openssl rand -hex 32"
    )

BRAND_NAME = os.getenv("BRAND_NAME", "Open Signup")
SIGNUP_ROUTE_PREFIX = os.getenv("SIGNUP_ROUTE_PREFIX", "/plugin/opensignup")
USERS_RESOURCE_ID = os.getenv("SIGNUP_USERS_RESOURCE_ID", "users")

# Email confirmation
SIGNUP_CONFIRM_EMAILS = os.getenv("SIGNUP_CONFIRM_EMAILS", "0") == "1"
SIGNUP_SEND_FROM = os.getenv("SIGNUP_SEND_FROM", "no-reply@localhost")
# Comma-separated origins (scheme://host[:port]) the confirmation link may point
# at. Empty accepts any url sent by the signup page.
SIGNUP_ALLOWED_URL_ORIGINS = tuple(
    origin.strip().rstrip("/").lower()
    for origin in os.getenv("SIGNUP_ALLOWED_URL_ORIGINS", "").split(",")
    if origin.strip()
)
SMTP_HOST = os.getenv("SMTP_HOST")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USERNAME = os.getenv("SMTP_USERNAME")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
SMTP_USE_TLS = os.getenv("SMTP_USE_TLS", "1") == "1"

# Password policy of the users resource
PASSWORD_MIN_LENGTH = int(os.getenv("PASSWORD_MIN_LENGTH", "8"))
PASSWORD_MAX_LENGTH = int(os.getenv("PASSWORD_MAX_LENGTH", "64"))

# Session cookie
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "opensignup_session")
SESSION_EXPIRATION_DAYS = int(os.getenv("SESSION_EXPIRATION_DAYS", "7"))
SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "1") == "1"

CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
