"""HTTP configuration provider."""

from __future__ import annotations

import copy
import logging
import time
from typing import Callable, Dict, Optional

import httpx

from ..core.errors import SourceLoadError, SourceUnavailable, WriteError
from ..core.merge import normalize_configuration
from ..core.provider import ConfigurationProvider
from ..core.types import Configuration

logger = logging.getLogger(__name__)


class RemoteConfigurationProvider(ConfigurationProvider):
    """Load configuration from a JSON document served over HTTP.

    Responses are cached for ``cache_ttl`` seconds. Transport failures
    (timeouts, refused connections) are retried ``retries`` times before
    the source is reported unavailable; HTTP and payload errors are not
    retried.
    """

    def __init__(
        self,
        name: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = 10.0,
        cache_ttl: float = 60.0,
        retries: int = 0,
        client: Optional[httpx.Client] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.url = url
        self.headers = dict(headers or {})
        self.timeout = timeout
        self.cache_ttl = cache_ttl
        self.retries = max(0, retries)
        self._clock = clock
        self._client = client or httpx.Client(timeout=timeout)
        self._owns_client = client is None
        self._cache: Optional[Configuration] = None
        self._fetched_at = 0.0

    def get_name(self) -> str:
        return self.name

    def is_available(self) -> bool:
        try:
            resp = self._client.head(self.url, headers=self.headers, timeout=self.timeout)
        except httpx.HTTPError:
            return False
        return resp.status_code < 400

    def load(self) -> Configuration:
        now = self._clock()
        if self._cache is not None and now - self._fetched_at < self.cache_ttl:
            return copy.deepcopy(self._cache)

        resp = self._request("GET")
        if resp.status_code != 200:
            raise SourceLoadError(
                f"Remote configuration service returned status {resp.status_code}",
                self.name,
            )
        try:
            data = resp.json()
        except ValueError as exc:
            raise SourceLoadError(
                f"Remote configuration at {self.url} is not valid JSON", self.name
            ) from exc
        self._cache = normalize_configuration(data, self.name)
        self._fetched_at = now
        return copy.deepcopy(self._cache)

    def save(self, config: Configuration) -> None:
        try:
            resp = self._client.post(
                self.url, json=config, headers=self.headers, timeout=self.timeout
            )
        except httpx.HTTPError as exc:
            raise WriteError(f"Failed to save remote configuration: {exc}") from exc
        if resp.status_code not in (200, 201):
            raise WriteError(
                f"Remote configuration service returned status {resp.status_code}"
            )
        self._cache = copy.deepcopy(config)
        self._fetched_at = self._clock()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def _request(self, method: str) -> httpx.Response:
        attempt = 0
        while True:
            try:
                return self._client.request(
                    method, self.url, headers=self.headers, timeout=self.timeout
                )
            except httpx.TimeoutException as exc:
                error: SourceUnavailable = SourceUnavailable(
                    f"Remote configuration request timed out after {self.timeout}s",
                    self.name,
                )
                cause: Exception = exc
            except httpx.TransportError as exc:
                error = SourceUnavailable(
                    f"Failed to reach remote configuration at {self.url}: {exc}",
                    self.name,
                )
                cause = exc
            if attempt >= self.retries:
                raise error from cause
            attempt += 1
            logger.debug("Retrying %s (%d/%d): %s", self.url, attempt, self.retries, cause)
