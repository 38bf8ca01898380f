import os
from typing import Dict, List

REQUIRED_ENV_VARS = ("BACKEND_URL", "BACKEND_PUBLIC_KEY", "JWT_SECRET")


class MissingEnvironmentError(RuntimeError):
    """Raised at startup when required environment variables are not set."""

    def __init__(self, missing: List[str]):
        self.missing = missing
        super().__init__(f"Missing required environment variables: {', '.join(missing)}")


def missing_env_vars() -> List[str]:
    return [name for name in REQUIRED_ENV_VARS if not os.getenv(name)]


def validate_env() -> Dict[str, str]:
    """Checks every required variable and returns their values.

    All missing names are reported at once so a misconfigured deployment
    can be fixed in a single pass.
    """
    missing = missing_env_vars()
    if missing:
        raise MissingEnvironmentError(missing)
    return {name: os.environ[name] for name in REQUIRED_ENV_VARS}


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


def is_production() -> bool:
    """Detects if running in production via PRODUCTION variable"""
    return _flag("PRODUCTION")


def get_backend_url() -> str:
    """Returns SQLAlchemy database URL of the backend store"""
    return os.getenv("BACKEND_URL", "")


def get_public_key() -> str:
    return os.getenv("BACKEND_PUBLIC_KEY", "")


def get_jwt_secret() -> str:
    return os.getenv("JWT_SECRET", "")


def get_jwt_algorithm() -> str:
    return os.getenv("JWT_ALGORITHM", "HS256")


def get_jwt_exp_seconds() -> int:
    return int(os.getenv("JWT_EXP_DELTA_SECONDS", "3600"))


def get_bcrypt_rounds() -> int:
    return int(os.getenv("BCRYPT_ROUNDS", "12"))


def get_impersonation_max_age() -> int:
    # 24 hours
    return int(os.getenv("IMPERSONATION_MAX_AGE_SECONDS", str(60 * 60 * 24)))


def rate_limit_enabled() -> bool:
    return _flag("RATE_LIMIT_ENABLED", "true")


def auto_create_tables() -> bool:
    return _flag("AUTO_CREATE_TABLES")


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()
