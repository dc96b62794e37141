"""Environment adapter protocol and registry."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Protocol, runtime_checkable

from .errors import NoAdapterForEnvironment
from .types import Configuration, ConfigurationSource, ValidationResult


class EnvironmentType(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"
    CLOUD = "cloud"
    CICD = "cicd"


@runtime_checkable
class EnvironmentAdapter(Protocol):
    """Per-environment policy: sources, defaults and validation."""

    def get_environment(self) -> str:
        """Get the environment tag this adapter serves."""
        ...

    def get_configuration_sources(self) -> List[ConfigurationSource]:
        """Get the sources to load, ordered lowest to highest precedence."""
        ...

    def transform_configuration(self, config: Configuration) -> Configuration:
        """Return a copy of ``config`` with environment defaults filled in.

        Only absent keys may be filled; the input must not be mutated.
        """
        ...

    def validate_configuration(self, config: Configuration) -> ValidationResult:
        """Check ``config`` against the environment's rules without side effects."""
        ...


AdapterFactory = Callable[[], EnvironmentAdapter]


class AdapterRegistry:
    """Map environment tags to adapter factories.

    Tags are matched case-insensitively. Aliases resolve to a canonical tag.
    """

    def __init__(self) -> None:
        self._factories: Dict[str, AdapterFactory] = {}
        self._aliases: Dict[str, str] = {}

    def register(
        self,
        environment: str,
        factory: AdapterFactory,
        aliases: Iterable[str] = (),
    ) -> None:
        tag = environment.lower()
        self._factories[tag] = factory
        self._aliases.pop(tag, None)
        for alias in aliases:
            self._aliases[alias.lower()] = tag

    def unregister(self, environment: str) -> None:
        tag = self._canonical(environment)
        self._factories.pop(tag, None)
        self._aliases = {a: t for a, t in self._aliases.items() if t != tag}

    def environments(self) -> List[str]:
        return sorted(self._factories)

    def get(self, environment: str) -> Optional[EnvironmentAdapter]:
        factory = self._factories.get(self._canonical(environment))
        return factory() if factory is not None else None

    def resolve(self, environment: str) -> EnvironmentAdapter:
        """Create the adapter for ``environment``.

        Raises:
            NoAdapterForEnvironment: If no adapter is registered for the tag.
        """
        adapter = self.get(environment)
        if adapter is None:
            raise NoAdapterForEnvironment(environment)
        return adapter

    def __contains__(self, environment: object) -> bool:
        return (
            isinstance(environment, str)
            and self._canonical(environment) in self._factories
        )

    def _canonical(self, environment: str) -> str:
        tag = environment.lower()
        return self._aliases.get(tag, tag)
