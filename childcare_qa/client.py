"""
HTTP client for the childcare backend.

Keep this module as the only place where backend HTTP calls are made.
Every failure of the round trip itself (unreachable host, timeout, a body
that is not JSON) is raised as TransportFailure; backend-reported errors are
returned as ordinary JSON for the normalizer to classify.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import requests

from childcare_qa.config import CHAT_PATH, COST_PATH, Settings, get_settings

logger = logging.getLogger(__name__)


class TransportFailure(Exception):
    """The request could not complete (network, timeout, or undecodable body)."""

    pass


def endpoint_url(path: str, api_base: Optional[str] = None) -> str:
    """Absolute API url when a base is configured, else the same-origin path."""
    return f"{api_base}{path}" if api_base else path


class ChildcareAPIClient:
    """Thin JSON-over-POST client. One call is one atomic round trip."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.http = session or requests.Session()

    def url_for(self, path: str) -> str:
        url = endpoint_url(path, self.settings.api_base())
        if url.startswith("/"):
            # same-origin relative path
            return self.settings.SITE_ORIGIN.rstrip("/") + url
        return url

    def post_json(self, path: str, payload: Dict[str, Any]) -> Tuple[int, Any]:
        """POST payload and return (status_code, decoded JSON body)."""
        url = self.url_for(path)
        try:
            res = self.http.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.settings.REQUEST_TIMEOUT_S,
            )
        except requests.RequestException as e:
            logger.warning("POST %s failed: %s", url, e)
            raise TransportFailure(str(e) or type(e).__name__) from e
        try:
            body = res.json()
        except ValueError as e:
            # requests' JSONDecodeError subclasses ValueError
            logger.warning("POST %s returned non-JSON body (status %s)", url, res.status_code)
            raise TransportFailure(f"Invalid JSON response: {e}") from e
        return res.status_code, body

    def chat(self, payload: Dict[str, Any]) -> Any:
        # non-2xx bodies still go to the normalizer
        _, body = self.post_json(CHAT_PATH, payload)
        return body

    def cost(self, payload: Dict[str, Any]) -> Tuple[int, Any]:
        return self.post_json(COST_PATH, payload)
