"""Environment adapter defined in conflux.yaml."""

from __future__ import annotations

import copy
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..core.paths import MISSING, get_path
from ..core.types import Configuration, ConfigurationSource
from .base import BaseEnvironmentAdapter


class DeclarativeEnvironmentAdapter(BaseEnvironmentAdapter):
    """Adapter whose sources, defaults and required keys come from data.

    Example ``conflux.yaml`` entry::

        environments:
          local:
            sources:
              - {name: base, type: file, path: config/base.yaml}
              - {name: env, type: environment, prefix: APP_}
            defaults:
              debug: true
            required:
              - database.host
    """

    def __init__(
        self,
        environment: str,
        sources: Iterable[ConfigurationSource],
        defaults: Optional[Mapping[str, Any]] = None,
        required: Iterable[str] = (),
    ):
        super().__init__()
        self.environment = environment
        self._sources = list(sources)
        self._defaults = copy.deepcopy(dict(defaults or {}))
        self.required = list(required)

    def get_configuration_sources(self) -> List[ConfigurationSource]:
        return list(self._sources)

    def defaults(self, config: Configuration) -> Dict[str, Any]:
        return self._defaults

    def check(self, config: Configuration, errors: List[str], warnings: List[str]) -> None:
        for key in self.required:
            if get_path(config, key) is MISSING:
                errors.append(f"Required configuration key missing: {key}")
