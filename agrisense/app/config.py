# agrisense/app/config.py
import os
from dotenv import load_dotenv
from pathlib import Path

dotenv_path = Path(__file__).parents[2] / '.env'
load_dotenv(dotenv_path)


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    # --- Upstream APIs (no keys needed) ---
    NOMINATIM_BASE_URL: str = os.getenv("NOMINATIM_BASE_URL", "https://nominatim.openstreetmap.org")
    OPEN_METEO_URL: str     = os.getenv("OPEN_METEO_URL", "https://api.open-meteo.com/v1/forecast")
    GEOCODE_USER_AGENT: str = os.getenv("GEOCODE_USER_AGENT", "AgriSense/1.0 (contact: support@agrisense.example)")

    # --- Advisory notifications ---
    ADVISORY_DELAY_SEC: float = float(os.getenv("ADVISORY_DELAY_SEC", "120"))
    # default | granted | denied
    NOTIFY_PERMISSION: str = os.getenv("NOTIFY_PERMISSION", "default")
    NOTIFY_GRANT_ON_REQUEST: bool = _flag("NOTIFY_GRANT_ON_REQUEST", "1")

    # Search path: accept the place when its reverse check errors out
    SEARCH_REVERSE_FAIL_OPEN: bool = _flag("SEARCH_REVERSE_FAIL_OPEN", "1")

    # --- Twilio (SMS) ---
    TWILIO_ACCOUNT_SID: str = os.getenv("TWILIO_ACCOUNT_SID", "")
    TWILIO_AUTH_TOKEN: str  = os.getenv("TWILIO_AUTH_TOKEN", "")
    TWILIO_SMS_NUMBER: str  = os.getenv("TWILIO_SMS_NUMBER", "")
    SMS_COUNTRY_CODE: str   = os.getenv("SMS_COUNTRY_CODE", "+91")

    # Cache / HTTP
    CACHE_TTL_SEC: int = int(os.getenv("CACHE_TTL_SEC", "3600"))
    HTTP_READ_TIMEOUT_SEC: float = float(os.getenv("HTTP_READ_TIMEOUT_SEC", "20"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

settings = Settings()
