"""Provider protocol for configuration sources."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .types import Configuration


@runtime_checkable
class ConfigurationProvider(Protocol):
    """Protocol defining the interface for configuration providers.

    A provider wraps exactly one concrete data source. The manager calls
    ``is_available`` before ``load`` and never calls one provider instance
    from two threads at once.
    """

    name: str

    def get_name(self) -> str:
        """Get the provider name, unique within one manager."""
        ...

    def load(self) -> Configuration:
        """Load configuration from the source.

        Returns:
            Nested configuration mapping; empty when the underlying
            resource is legitimately absent.

        Raises:
            SourceUnavailable: If the resource cannot be reached.
            SourceLoadError: If the resource content is unusable.
        """
        ...

    def save(self, config: Configuration) -> None:
        """Persist configuration to the source.

        Raises:
            WriteError: If the configuration could not be written.
        """
        ...

    def is_available(self) -> bool:
        """Check whether the source can be loaded. Never raises."""
        ...
