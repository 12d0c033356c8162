from typing import Optional

import requests

from storefront.config import get_config
from storefront.logging import get_logger

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class ApiAuthentication:
    """Handles bearer-token authentication and session creation using the AppConfig singleton."""
    def __init__(self, token: Optional[str] = None) -> None:
        """Initializes the authentication handler.

        Args:
            token (str, optional): Explicit access token. Falls back to AppConfig.api_token.
        """
        self.config = get_config()
        self.logger = get_logger(__name__)
        self.token = token if token is not None else self.config.api_token

    def get_auth_headers(self) -> dict:
        """Builds the request headers for the current token.

        Returns:
            dict: Standard JSON headers, plus Authorization when a token is available.
        """
        headers = dict(DEFAULT_HEADERS)
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def get_session(self) -> requests.Session:
        """Returns a requests Session carrying the authentication headers.

        Returns:
            requests.Session: The configured session.
        """
        session = requests.Session()
        session.headers.update(self.get_auth_headers())
        if self.token:
            self.logger.info(f"Configuring authenticated session for {self.config.api_base_url}")
        else:
            self.logger.info(f"Configuring anonymous session for {self.config.api_base_url}")
        return session

def get_api_auth(token: Optional[str] = None) -> ApiAuthentication:
    """Returns a new ApiAuthentication instance using the latest config."""
    return ApiAuthentication(token)
