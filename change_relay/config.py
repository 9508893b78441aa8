# change_relay/config.py
from dotenv import load_dotenv
import os
from typing import Optional, Dict

# load local .env if present
load_dotenv()

DEFAULT_CURRENT_BASE_URL = "https://api.current-rms.com/api/v1"


def _get_param_from_ssm(name: str, decrypt: bool = False) -> Optional[str]:
    """
    Try to fetch from SSM when a parameter prefix is configured. Import the
    boto3 helper lazily so imports don't fail if boto3/SSM isn't available or
    the instance role can't access SSM.
    """
    prefix = os.getenv("SSM_PARAM_PREFIX")
    if not prefix:
        return None
    try:
        from .utils.ssm import get_param
        return get_param(name, prefix=prefix, decrypt=decrypt)
    except Exception:
        return None


def _get_param_with_fallback(name: str, decrypt: bool = False, default: Optional[str] = None) -> Optional[str]:
    val = _get_param_from_ssm(name, decrypt=decrypt)
    if val:
        return val
    return os.getenv(name, default)


def _get_int(name: str, default: int) -> int:
    raw = _get_param_with_fallback(name, default=None)
    if raw is None or raw == "":
        return default
    return int(raw)


def _get_bool(name: str, default: bool) -> bool:
    raw = _get_param_with_fallback(name, default=None)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def get_database_url() -> str:
    db = _get_param_with_fallback("DATABASE_URL", decrypt=False)
    if db:
        return db
    return "sqlite:///state.db"


def get_current_config() -> Dict[str, str]:
    return {
        "base_url": _get_param_with_fallback("CURRENT_BASE_URL", default=DEFAULT_CURRENT_BASE_URL) or "",
        "subdomain": _get_param_with_fallback("CURRENT_SUBDOMAIN", decrypt=False) or "",
        "api_key": _get_param_with_fallback("CURRENT_API_KEY", decrypt=True) or "",
    }


def get_port() -> int:
    return _get_int("PORT", 3000)


class Config:
    SQLALCHEMY_DATABASE_URI = get_database_url()
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    _current = get_current_config()
    CURRENT_BASE_URL = _current["base_url"]
    CURRENT_SUBDOMAIN = _current["subdomain"]
    CURRENT_API_KEY = _current["api_key"]

    POLL_INTERVAL_SECONDS = _get_int("POLL_INTERVAL_SECONDS", 60)
    POLL_PAGE_SIZE = _get_int("POLL_PAGE_SIZE", 100)
    # 1 keeps the single-page behaviour; pages stop early on a short page
    POLL_MAX_PAGES = _get_int("POLL_MAX_PAGES", 10)
    HTTP_TIMEOUT_SECONDS = _get_int("HTTP_TIMEOUT_SECONDS", 30)
    CURSOR_FALLBACK_MINUTES = _get_int("CURSOR_FALLBACK_MINUTES", 5)
    SCHEDULER_ENABLED = _get_bool("SCHEDULER_ENABLED", True)
