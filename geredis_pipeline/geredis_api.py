import logging
import requests
from datetime import datetime
from typing import Dict, Optional
from .config import BASE_URL, request_timeout

logger = logging.getLogger(__name__)

TOKEN_PATH = "/oauth/token"
LOAD_CURVE_PATH = "/metering_data/consumption_load_curve"
DAILY_CONSUMPTION_PATH = "/metering_data/daily_consumption"


class GeredisError(Exception):
    """Raised when the Geredis API rejects a request or cannot be reached.

    ``response`` holds the decoded JSON error body when the server sent one,
    e.g. ``{"error": "ADAM-ERR0123", "error_description": "..."}``.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, response: Optional[Dict] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response

    @property
    def error_description(self) -> Optional[str]:
        if isinstance(self.response, dict):
            return self.response.get("error_description")
        return None


def _error_body(resp: requests.Response) -> Optional[Dict]:
    try:
        body = resp.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        # some gateways nest the payload one level down
        return body["error"]
    return body if isinstance(body, dict) else None


def _json_body(resp: requests.Response) -> Dict:
    try:
        body = resp.json()
    except ValueError as e:
        raise GeredisError(f"Malformed response from Geredis API: {e}", status_code=resp.status_code) from e
    if not isinstance(body, dict):
        raise GeredisError(
            f"Unexpected response from Geredis API: {type(body).__name__}", status_code=resp.status_code
        )
    return body


class Session:
    """Authenticated session against the Geredis metering API."""

    def __init__(
        self,
        user: str,
        password: str,
        base_url: str = BASE_URL,
        usage_point_id: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.user = user
        self.password = password
        self.base_url = base_url.rstrip("/")
        self.usage_point_id = usage_point_id
        self.timeout = timeout if timeout is not None else request_timeout()
        self.access_token: Optional[str] = None
        self.http = requests.Session()

    def _raise_for_status(self, resp: requests.Response) -> None:
        if resp.ok:
            return
        body = _error_body(resp)
        description = body.get("error_description") if body else None
        raise GeredisError(
            f"{resp.status_code} {description or resp.reason}",
            status_code=resp.status_code,
            response=body,
        )

    def authenticate(self) -> str:
        """Exchange the account credentials for a bearer token."""
        payload = {"grant_type": "password", "username": self.user, "password": self.password}
        try:
            resp = self.http.post(self.base_url + TOKEN_PATH, data=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise GeredisError(f"Cannot reach Geredis API: {e}") from e
        self._raise_for_status(resp)
        body = _json_body(resp)
        token = body.get("access_token")
        if not token:
            raise GeredisError("Authentication response did not contain an access token")
        self.access_token = token
        logger.debug("Authenticated Geredis session for %s", self.user)
        return token

    def _get_meter_reading(self, path: str, start: str, end: str) -> Dict:
        if datetime.strptime(start, "%Y-%m-%d") >= datetime.strptime(end, "%Y-%m-%d"):
            raise ValueError(f"Window start {start} must precede its end {end}.")
        if self.access_token is None:
            self.authenticate()
        params = {"start": start, "end": end}
        if self.usage_point_id:
            params["usage_point_id"] = self.usage_point_id
        headers = {"Authorization": f"Bearer {self.access_token}", "Accept": "application/json"}
        try:
            resp = self.http.get(self.base_url + path, params=params, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise GeredisError(f"Cannot reach Geredis API: {e}") from e
        self._raise_for_status(resp)
        body = _json_body(resp)
        return body.get("meter_reading", body)

    def get_load_curve(self, start: str, end: str) -> Dict:
        """Half-hourly average power readings (W) for the start-end window."""
        return self._get_meter_reading(LOAD_CURVE_PATH, start, end)

    def get_daily_consumption(self, start: str, end: str) -> Dict:
        """One energy reading (Wh) per day for the start-end window."""
        return self._get_meter_reading(DAILY_CONSUMPTION_PATH, start, end)
