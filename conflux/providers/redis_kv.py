from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import redis

from ..core.errors import SourceUnavailable, WriteError
from ..core.paths import iter_hierarchical, unflatten
from ..core.provider import ConfigurationProvider
from ..core.types import Configuration
from .environment import coerce_scalar

logger = logging.getLogger(__name__)


class RedisConfigurationProvider(ConfigurationProvider):
    """Remote key/value source stored as flat dotted keys in Redis.

    ``<prefix>database.host = h1`` loads as ``{"database": {"host": "h1"}}``.
    """

    def __init__(
        self,
        name: str,
        url: str,
        prefix: str = "",
        client: Optional[Any] = None,
    ):
        self.name = name
        self.url = url
        self.prefix = prefix
        self.client = client or redis.Redis.from_url(url, decode_responses=True)

    def _prefixed(self, key: str) -> str:
        return f"{self.prefix}{key}" if self.prefix else key

    def _unprefixed(self, key: str) -> str:
        if self.prefix and key.startswith(self.prefix):
            return key[len(self.prefix) :]
        return key

    def get_name(self) -> str:
        return self.name

    def is_available(self) -> bool:
        try:
            return bool(self.client.ping())
        except redis.RedisError:
            return False

    def load(self) -> Configuration:
        try:
            keys = sorted(self.client.scan_iter(match=self._prefixed("*")))
            values = self.client.mget(keys) if keys else []
        except redis.RedisError as exc:
            raise SourceUnavailable(f"Failed to read {self.url}: {exc}", self.name) from exc
        flat: Dict[str, Any] = {}
        for k, v in zip(keys, values):
            if v is None:
                continue
            flat[self._unprefixed(k)] = coerce_scalar(v)
        return unflatten(flat)

    def save(self, config: Configuration) -> None:
        pipe = self.client.pipeline()
        for key, value in iter_hierarchical(config):
            pipe.set(self._prefixed(key), json.dumps(value))
        try:
            pipe.execute()
        except redis.RedisError as exc:
            raise WriteError(f"Failed to save configuration to {self.url}: {exc}") from exc

    def close(self) -> None:
        self.client.close()
