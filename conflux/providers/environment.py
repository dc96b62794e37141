"""Process environment variable configuration provider."""

from __future__ import annotations

import json
import logging
import math
import os
from typing import Any, Dict, Mapping, Optional

from ..core.errors import WriteError
from ..core.paths import unflatten
from ..core.provider import ConfigurationProvider
from ..core.types import Configuration, ConfigValue

logger = logging.getLogger(__name__)


def coerce_scalar(raw: str) -> ConfigValue:
    """Interpret a string from an environment variable or key/value store.

    JSON literals (numbers, booleans, null, arrays, objects, quoted strings)
    are decoded first; then case-insensitive ``true``/``false``; then
    numbers; anything else stays a string.
    """
    try:
        decoded = json.loads(raw)
    except ValueError:
        pass
    else:
        if not (isinstance(decoded, float) and not math.isfinite(decoded)):
            return decoded
    lowered = raw.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        number = float(raw)
    except ValueError:
        return raw
    return number if math.isfinite(number) else raw


class EnvironmentVariableProvider(ConfigurationProvider):
    """Configuration provider over process environment variables.

    ``APP_DATABASE_PORT=5432`` with prefix ``APP_`` becomes
    ``{"database": {"port": 5432}}``. Without a prefix every variable is
    included.
    """

    def __init__(
        self,
        name: str,
        prefix: str = "",
        separator: str = "_",
        environ: Optional[Mapping[str, str]] = None,
    ):
        if not separator:
            raise ValueError("separator must not be empty")
        self.name = name
        self.prefix = prefix
        self.separator = separator
        self._environ = environ

    def get_name(self) -> str:
        return self.name

    def is_available(self) -> bool:
        return True

    def load(self) -> Configuration:
        environ = self._environ if self._environ is not None else os.environ
        flat: Dict[str, Any] = {}
        for key, value in environ.items():
            if self.prefix and not key.startswith(self.prefix):
                continue
            name = key[len(self.prefix):] if self.prefix else key
            parts = [p for p in name.lower().split(self.separator) if p]
            if not parts:
                continue
            flat[".".join(parts)] = coerce_scalar(value)
        tree = unflatten(flat)
        logger.debug("Loaded %d environment variables for %s", len(flat), self.name)
        return tree

    def save(self, config: Configuration) -> None:
        raise WriteError("Saving to environment variables is not supported")
