"""
Configuration settings for the Student Registry Backend
"""

import os
import logging

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Configure logging
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Database configuration
DB_USER = os.getenv("DB_USER", "postgres")
DB_PASSWORD = os.getenv("DB_PASSWORD", "")
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_PORT = int(os.getenv("DB_PORT", 5432))
DB_NAME = os.getenv("DB_NAME", "studentdb")

# DATABASE_URL wins over the individual DB_* variables when both are set
DATABASE_URL = os.getenv("DATABASE_URL") or (
    f"postgresql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
)

DB_POOL_MIN_SIZE = int(os.getenv("DB_POOL_MIN_SIZE", 2))
DB_POOL_MAX_SIZE = int(os.getenv("DB_POOL_MAX_SIZE", 10))
DB_COMMAND_TIMEOUT = float(os.getenv("DB_COMMAND_TIMEOUT", 60))
DB_AUTO_INIT = _env_bool("DB_AUTO_INIT", True)

# Server configuration
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 3000))

# Credential hashing cost (scrypt)
SCRYPT_N = int(os.getenv("SCRYPT_N", 2 ** 14))
SCRYPT_R = int(os.getenv("SCRYPT_R", 8))
SCRYPT_P = int(os.getenv("SCRYPT_P", 1))

# CORS settings - the UI may be served from a different origin
ALLOWED_ORIGINS = [
    origin.strip() for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",") if origin.strip()
]

if DB_POOL_MIN_SIZE > DB_POOL_MAX_SIZE:
    raise ValueError("DB_POOL_MIN_SIZE must not exceed DB_POOL_MAX_SIZE")

logger.info(f"Database host: {DB_HOST}:{DB_PORT}, pool size {DB_POOL_MIN_SIZE}-{DB_POOL_MAX_SIZE}")
