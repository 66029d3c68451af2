"""Sequential request execution against the rate-limited Spotify Web API.

Bulk endpoints cap every call at 100 items, so a single logical operation is
often split into several physical requests. ``sequential_fetch`` runs them one
after the other and hands back every parsed body, error bodies included, in
request order; callers decide what to do with failures.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence
from urllib.parse import urlparse

import requests
from requests import exceptions as requests_exceptions

from mixtape.observability.metrics import record_upstream_request
from mixtape.settings import SpotifyApiSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestConfig:
    """One physical request: target URL plus request options."""

    url: str
    method: str = "GET"
    headers: Mapping[str, str] = field(default_factory=dict)
    params: Optional[Mapping[str, Any]] = None
    json: Any = None


def error_body(status: int, message: str) -> Dict[str, Any]:
    """Build a body shaped like a Spotify error response."""
    return {"error": {"status": status, "message": message}}


class SpotifyApiClient:
    """Executes RequestConfigs with a timeout and a bounded 429 retry."""

    def __init__(
        self,
        settings: SpotifyApiSettings,
        http: Any = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings
        # Anything exposing requests' module-level ``request`` signature
        self._http = http or requests
        self._sleep = sleep

    def url(self, path: str) -> str:
        return f"{self.settings.api_base_url}/{path.lstrip('/')}"

    def build(
        self,
        access_token: str,
        path: str,
        *,
        method: str = "GET",
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
    ) -> RequestConfig:
        """Prepare an authenticated request for an API path or absolute URL."""
        headers = {"Authorization": f"Bearer {access_token}"}
        if json is not None:
            headers["Content-Type"] = "application/json"
        target = path if path.startswith("http") else self.url(path)
        return RequestConfig(url=target, method=method, headers=headers, params=params, json=json)

    def send(self, config: RequestConfig) -> Any:
        """Perform one request and return its parsed JSON body.

        Transport failures and malformed bodies come back as error-shaped
        bodies rather than exceptions.
        """
        endpoint = self._endpoint_label(config.url)
        attempt = 0
        while True:
            try:
                response = self._http.request(
                    config.method,
                    config.url,
                    headers=dict(config.headers),
                    params=config.params,
                    json=config.json,
                    timeout=self.settings.request_timeout_seconds,
                )
            except requests_exceptions.RequestException as exc:
                logger.warning("Spotify %s %s failed: %s", config.method, endpoint, exc)
                record_upstream_request(endpoint, 503)
                return error_body(503, f"Spotify did not respond: {exc}")

            record_upstream_request(endpoint, response.status_code)
            if response.status_code == 429 and attempt < self.settings.rate_limit_retries:
                delay = self._retry_delay(response)
                attempt += 1
                logger.warning(
                    "Spotify rate limited %s %s (attempt %s/%s); retrying in %.1fs",
                    config.method, endpoint, attempt, self.settings.rate_limit_retries, delay,
                )
                self._sleep(delay)
                continue
            return self._parse(response)

    def _retry_delay(self, response: Any) -> float:
        raw = (getattr(response, "headers", None) or {}).get("Retry-After")
        try:
            delay = float(raw) if raw is not None else 1.0
        except (TypeError, ValueError):
            delay = 1.0
        return max(0.0, min(delay, self.settings.retry_after_cap_seconds))

    def _parse(self, response: Any) -> Any:
        status = response.status_code
        ok = 200 <= status < 400
        if not response.content:
            return {} if ok else error_body(status, getattr(response, "reason", None) or "Empty response")
        try:
            body = response.json()
        except ValueError:
            logger.warning("Spotify answered %s with a non-JSON body", status)
            return error_body(status if not ok else 502, "Malformed response from Spotify")
        if not ok and not (isinstance(body, dict) and "error" in body):
            return error_body(status, getattr(response, "reason", None) or "Request failed")
        return body

    def _endpoint_label(self, url: str) -> str:
        path = urlparse(url).path
        base_path = urlparse(self.settings.api_base_url).path.rstrip("/")
        if base_path and path.startswith(base_path):
            path = path[len(base_path):]
        segments = [segment for segment in path.split("/") if segment]
        return segments[0] if segments else "root"


def sequential_fetch(client: SpotifyApiClient, configs: Sequence[RequestConfig]) -> List[Any]:
    """Issue each request only after the previous one has answered.

    Returns one parsed body per config, in input order. Error bodies are
    collected, never short-circuited.
    """
    results: List[Any] = []
    for config in configs:
        results.append(client.send(config))
    return results


def follow_pages(client: SpotifyApiClient, first_page: Any, *, access_token: str) -> Iterator[Any]:
    """Yield a paging object and then every page behind its ``next`` links, in order."""
    page = first_page
    yield page
    while isinstance(page, dict) and page.get("next") and "error" not in page:
        page = client.send(client.build(access_token, page["next"]))
        yield page


__all__ = [
    "RequestConfig",
    "SpotifyApiClient",
    "error_body",
    "sequential_fetch",
    "follow_pages",
]
