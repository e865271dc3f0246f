"""
HTTP client for the WebLogic REST management API.

Credentials are not configured here: the exporter forwards whatever
Authorization and Cookie headers the Prometheus scrape carried, and
hands any Set-Cookie the server sends back to the caller.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional

import httpx

from wls_exporter.errors import (
    AuthenticationChallengeError,
    NotAuthorizedError,
    TransportError,
)

log = logging.getLogger(__name__)

SEARCH_PATH = "/management/weblogic/latest/serverRuntime/search"
DOMAIN_SEARCH_PATH = "/management/weblogic/latest/domainRuntime/search"

FORWARDED_HEADERS = ("Authorization", "Cookie")

_REALM_RE = re.compile(r'realm="([^"]*)"', re.IGNORECASE)


def search_url(host: str, port: int, path: str = SEARCH_PATH) -> str:
    return f"http://{host}:{port}{path}"


class WebClient:

    def __init__(
        self,
        url: str,
        timeout_seconds: float = 5.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.url = url
        self._headers: Dict[str, str] = {}
        self._timeout = timeout_seconds
        self._client = httpx.Client(timeout=self._timeout, transport=transport)
        self.set_cookie: Optional[str] = None

    def put_header(self, name: str, value: str):
        self._headers[name] = value

    def forward_headers(self, headers) -> None:
        """Copy the credential headers of an inbound request, if present."""
        for name in FORWARDED_HEADERS:
            value = headers.get(name)
            if value:
                self.put_header(name, value)

    def query(self, body: str) -> Dict[str, Any]:
        """POST one search body, return the decoded JSON response."""
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            # The REST API rejects modifying requests without this header
            "X-Requested-By": "wls-exporter",
            **self._headers,
        }

        try:
            response = self._client.post(self.url, content=body, headers=headers)
        except httpx.HTTPError as e:
            raise TransportError(f"request to {self.url} failed: {e}") from e

        if response.status_code == 401:
            raise AuthenticationChallengeError(_realm(response.headers.get("WWW-Authenticate")))
        if response.status_code == 403:
            raise NotAuthorizedError(f"not authorized to query {self.url}")
        if response.status_code >= 400:
            raise TransportError(f"{self.url} returned HTTP {response.status_code}")

        if "set-cookie" in response.headers:
            self.set_cookie = response.headers["set-cookie"]

        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"{self.url} did not return JSON: {e}") from e

    def close(self):
        self._client.close()


def _realm(challenge: Optional[str]) -> str:
    if challenge:
        match = _REALM_RE.search(challenge)
        if match:
            return match.group(1)
    log.debug("No realm in authentication challenge %r", challenge)
    return "weblogic"
