# storefront/config.py
import os


def _getenv_bool(key: str, default: bool = False) -> bool:
    val = os.getenv(key)
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "on"}


def _getenv_int(key: str, default: int) -> int:
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        return default


# ==================== BASE DE DATOS ====================
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./storefront.db")
DB_POOL_SIZE = _getenv_int("DB_POOL_SIZE", 10)
DB_MAX_OVERFLOW = _getenv_int("DB_MAX_OVERFLOW", 5)
DB_POOL_TIMEOUT = _getenv_int("DB_POOL_TIMEOUT", 30)  # segundos
DB_POOL_RECYCLE = _getenv_int("DB_POOL_RECYCLE", 1800)  # segundos
DB_ECHO = _getenv_bool("DB_ECHO", False)

# ==================== AUTH ====================
JWT_SECRET = os.getenv("JWT_SECRET", "fallback-secret")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = _getenv_int("ACCESS_TOKEN_EXPIRE_MINUTES", 60)
BCRYPT_ROUNDS = _getenv_int("BCRYPT_ROUNDS", 10)

# ==================== API ====================
API_PREFIX = os.getenv("API_PREFIX", "/api/v1")
API_VERSION = os.getenv("API_VERSION", "1.0.0")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
