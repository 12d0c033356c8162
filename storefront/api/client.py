from __future__ import annotations

from typing import Any, Callable, Mapping, Optional

import requests

from storefront.api.auth import get_api_auth
from storefront.api.errors import (
    ApiError,
    NetworkError,
    ResponseFormatError,
    backend_message,
    error_for_status,
)
from storefront.config import get_config
from storefront.logging import get_logger

# Statuses that prove the server is up even though the probe is unauthenticated
REACHABLE_STATUSES = (200, 401, 405)


class ApiClient:
    """Thin JSON client for the bookstore REST API.

    Wraps a requests Session, attaches the bearer token, maps non-2xx responses
    to ApiError subclasses and retries a request once after a 401 when a token
    refresh callback is configured.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        token: Optional[str] = None,
        on_token_refresh: Optional[Callable[[], Optional[str]]] = None,
        timeout: Optional[float] = None,
    ) -> None:
        config = get_config()
        self.logger = get_logger(__name__)
        self.base_url = (base_url or config.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else config.request_timeout
        self.on_token_refresh = on_token_refresh

        auth = get_api_auth(token)
        self.token = auth.token
        if session is None:
            session = auth.get_session()
        else:
            session.headers.update(auth.get_auth_headers())
        self.session = session

    # ---------- auth ----------

    def set_token(self, token: Optional[str]) -> None:
        """Swap the bearer token used for subsequent requests."""
        self.token = token
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"
        else:
            self.session.headers.pop("Authorization", None)

    # ---------- request plumbing ----------

    def url_for(self, endpoint: str) -> str:
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    @staticmethod
    def clean_params(params: Optional[Mapping[str, Any]]) -> Optional[dict]:
        """Drop unset query parameters and render booleans the way the backend expects."""
        if not params:
            return None
        cleaned = {}
        for key, value in params.items():
            if value is None:
                continue
            if isinstance(value, bool):
                value = "true" if value else "false"
            cleaned[key] = value
        return cleaned

    def request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        timeout: Optional[float] = None,
        _retried: bool = False,
    ) -> Any:
        """Send a request and return the decoded body.

        Args:
            method (str): HTTP verb.
            endpoint (str): Path relative to the API base URL.
            params (Mapping, optional): Query parameters, None values are dropped.
            json (Any, optional): JSON request body.
            timeout (float, optional): Per-call timeout, defaults to AppConfig.request_timeout.
        Returns:
            Any: Decoded JSON body, or None for an empty response.
        Raises:
            NetworkError: If the server could not be reached or timed out.
            ApiError: If the server answered with a non-2xx status or a failed envelope.
        """
        url = self.url_for(endpoint)
        self.logger.debug(f"{method} {url}")
        try:
            response = self.session.request(
                method,
                url,
                params=self.clean_params(params),
                json=json,
                timeout=timeout if timeout is not None else self.timeout,
            )
        except requests.exceptions.Timeout as e:
            self.logger.warning(f"{method} {url} timed out")
            raise NetworkError("The request timed out. Please try again.") from e
        except requests.exceptions.ConnectionError as e:
            self.logger.warning(f"{method} {url} failed to connect: {e}")
            raise NetworkError() from e
        except requests.exceptions.RequestException as e:
            self.logger.warning(f"{method} {url} failed: {e}")
            raise NetworkError("Could not reach the server. Please try again later.") from e

        self.logger.debug(f"{method} {url} -> {response.status_code}")
        if response.status_code == 401 and not _retried and self.token and self.on_token_refresh:
            self.logger.info("Access token rejected, attempting refresh")
            new_token = self.on_token_refresh()
            if new_token:
                self.set_token(new_token)
                return self.request(method, endpoint, params=params, json=json, timeout=timeout, _retried=True)
        return self.handle_response(response)

    def handle_response(self, response: requests.Response) -> Any:
        """Decode a response, raising the matching ApiError for failures."""
        ok = 200 <= response.status_code < 300
        body = self._decode(response, strict=ok)
        if not ok:
            raise error_for_status(response.status_code, body)
        if isinstance(body, Mapping) and body.get("success") is False:
            raise ApiError(
                backend_message(body) or "Request failed",
                status_code=response.status_code,
                details=body,
                error_code=body.get("error_code"),
            )
        return body

    def _decode(self, response: requests.Response, strict: bool) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            if strict:
                self.logger.error(f"Could not decode response from {response.url}: {e}")
                raise ResponseFormatError(status_code=response.status_code, details=response.text) from e
            return response.text

    def get(self, endpoint: str, params: Optional[Mapping[str, Any]] = None, timeout: Optional[float] = None) -> Any:
        return self.request("GET", endpoint, params=params, timeout=timeout)

    def post(self, endpoint: str, json: Any = None, params: Optional[Mapping[str, Any]] = None) -> Any:
        return self.request("POST", endpoint, params=params, json=json)

    def put(self, endpoint: str, json: Any = None) -> Any:
        return self.request("PUT", endpoint, json=json)

    def patch(self, endpoint: str, json: Any = None) -> Any:
        return self.request("PATCH", endpoint, json=json)

    def delete(self, endpoint: str) -> Any:
        return self.request("DELETE", endpoint)

    # ---------- envelopes ----------

    @staticmethod
    def unwrap(payload: Any) -> Any:
        """Return ``payload["data"]`` for ``{data: ...}`` envelopes, else the payload itself."""
        if isinstance(payload, Mapping) and payload.get("data") is not None:
            return payload["data"]
        return payload

    @staticmethod
    def extract_items(payload: Any, *keys: str) -> list:
        """Find the list of records in a response, whatever envelope it came in."""
        if isinstance(payload, list):
            return payload
        if not isinstance(payload, Mapping):
            return []
        for key in (*keys, "results", "data"):
            value = payload.get(key)
            if isinstance(value, list):
                return value
            if isinstance(value, Mapping):
                nested = ApiClient.extract_items(value, *keys)
                if nested:
                    return nested
        return []

    # ---------- misc ----------

    def build_image_url(self, path: Optional[str]) -> Optional[str]:
        """Resolve a media path against the server root (the API base without ``/api``)."""
        if not path:
            return None
        if path.startswith(("http://", "https://")):
            return path
        root = self.base_url[: -len("/api")] if self.base_url.endswith("/api") else self.base_url
        return f"{root}/{path.lstrip('/')}"

    def check_connectivity(self, timeout: float = 5.0) -> bool:
        """Probe the login endpoint; any answer in REACHABLE_STATUSES means the server is up."""
        url = self.url_for("/login/")
        try:
            response = self.session.get(url, timeout=timeout)
        except requests.exceptions.RequestException as e:
            self.logger.warning(f"Connectivity check against {url} failed: {e}")
            return False
        reachable = response.status_code in REACHABLE_STATUSES
        self.logger.info(f"Connectivity check against {url}: {response.status_code} (reachable={reachable})")
        return reachable


def get_api_client(token: Optional[str] = None, **kwargs) -> ApiClient:
    """Returns a new ApiClient using the latest config."""
    return ApiClient(token=token, **kwargs)
