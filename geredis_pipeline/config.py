from dotenv import load_dotenv
import os

load_dotenv()

BASE_URL = os.getenv("GEREDIS_BASE_URL", "https://espace-client.geredis.fr/api")
USER = os.getenv("GEREDIS_USER", "")
PASSWORD = os.getenv("GEREDIS_PASSWORD", "")
USAGE_POINT_ID = os.getenv("GEREDIS_PRM") or None
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def request_timeout() -> float:
    value = os.getenv("REQUEST_TIMEOUT", "30")
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"REQUEST_TIMEOUT must be a number of seconds, got {value!r}") from None
