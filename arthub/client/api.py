import logging
from typing import Any, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10  # seconds, applied to every call


class ApiError(Exception):
    """A failed API call. ``status`` is None for network failures."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


class ApiClient:
    """
    Minimal JSON client for the Art Hub API.

    ``session`` is anything with a ``requests.Session``-style ``request``
    method (a FastAPI ``TestClient`` works too).
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        session=None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def _headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def request(self, method: str, path: str, json: Any = None, params: Optional[dict] = None):
        url = f"{self.base_url}{path}"

        try:
            response = self.session.request(
                method,
                url,
                json=json,
                params=params,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise ApiError("Network error, please check your connection") from e

        if response.status_code >= 400:
            raise ApiError(_error_message(response), response.status_code)

        if not response.content:
            return None
        return response.json()

    def get(self, path: str, params: Optional[dict] = None):
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None):
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Any = None):
        return self.request("PUT", path, json=json)

    def patch(self, path: str, json: Any = None):
        return self.request("PATCH", path, json=json)

    def delete(self, path: str):
        return self.request("DELETE", path)


def _error_message(response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"Request failed with status {response.status_code}"

    detail = body.get("detail") if isinstance(body, dict) else None

    if isinstance(detail, str):
        return detail

    # pydantic validation errors come back as a list
    if isinstance(detail, list) and detail:
        first = detail[0]
        if isinstance(first, dict) and first.get("msg"):
            return first["msg"]

    return f"Request failed with status {response.status_code}"
