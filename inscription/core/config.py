import os

# PostgreSQL
POSTGRES_USER = os.getenv("POSTGRES_USER", "postgres")
POSTGRES_PASSWORD = os.getenv("POSTGRES_PASSWORD", "postgres")
POSTGRES_DB = os.getenv("POSTGRES_DB", "inscription")
POSTGRES_HOST = os.getenv("POSTGRES_HOST", "db")
POSTGRES_PORT = os.getenv("POSTGRES_PORT", "5432")

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql+asyncpg://{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_HOST}:{POSTGRES_PORT}/{POSTGRES_DB}",
)

# Environment
ENVIRONMENT = os.getenv("ENVIRONMENT", "production").lower()
DEBUG = ENVIRONMENT in ["development", "dev"]

# Database retry
DB_RETRY_ATTEMPTS = int(os.getenv("DB_RETRY_ATTEMPTS", "3"))
DB_RETRY_DELAY = float(os.getenv("DB_RETRY_DELAY", "1.0"))
DB_RETRY_BACKOFF_FACTOR = float(os.getenv("DB_RETRY_BACKOFF_FACTOR", "2.0"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO" if not DEBUG else "DEBUG")
LOG_FORMAT = os.getenv("LOG_FORMAT", "json" if not DEBUG else "text")

# Application
APP_NAME = os.getenv("APP_NAME", "Club Inscription API")
APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS", "http://localhost:3000,http://localhost:5173"
    ).split(",")
    if origin.strip()
]

# Rate limiting
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
REGISTRATION_RATE_LIMIT = os.getenv("REGISTRATION_RATE_LIMIT", "5/minute")

# Plan categories: tokens looked up in plan names when a plan has no explicit age group
CHILD_PLAN_MARKER = os.getenv("CHILD_PLAN_MARKER", "enfant").lower()
TEEN_PLAN_MARKER = os.getenv("TEEN_PLAN_MARKER", "ado").lower()

# Subscriptions
SUBSCRIPTION_NOTE = os.getenv(
    "SUBSCRIPTION_NOTE", "Abonnement créé depuis formulaire web"
)
DEFAULT_PAYMENT_METHOD = os.getenv("DEFAULT_PAYMENT_METHOD", "card")

# Seed demo disciplines and plans on an empty database
SEED_DEMO_DATA = os.getenv("SEED_DEMO_DATA", "true" if DEBUG else "false").lower() == "true"


def validate_config():
    """Validate critical settings at startup"""
    errors = []

    if not DATABASE_URL:
        errors.append("DATABASE_URL is required")

    if DB_RETRY_ATTEMPTS < 1:
        errors.append("DB_RETRY_ATTEMPTS must be >= 1")

    if DB_RETRY_DELAY < 0:
        errors.append("DB_RETRY_DELAY must be >= 0")

    if not CHILD_PLAN_MARKER or not TEEN_PLAN_MARKER:
        errors.append("CHILD_PLAN_MARKER and TEEN_PLAN_MARKER must not be empty")

    if CHILD_PLAN_MARKER == TEEN_PLAN_MARKER:
        errors.append("CHILD_PLAN_MARKER and TEEN_PLAN_MARKER must differ")

    if LOG_FORMAT.lower() not in ["json", "text"]:
        errors.append("LOG_FORMAT must be 'json' or 'text'")

    if errors:
        raise ValueError(f"Configuration errors: {'; '.join(errors)}")


# Validate on import, warn only
if os.getenv("VALIDATE_CONFIG_ON_IMPORT", "true").lower() == "true":
    try:
        validate_config()
    except ValueError as e:
        print(f"⚠️  Configuration warning: {e}")
