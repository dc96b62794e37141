"""Exception hierarchy for the conflux configuration system."""

from __future__ import annotations

from typing import Any, Optional


class ConfigurationError(Exception):
    """Base class for every error raised by conflux."""


class SourceError(ConfigurationError):
    """A single configuration source could not contribute to a load.

    Attributes:
        source: Name of the source that failed, when known.
    """

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.source = source


class SourceUnavailable(SourceError):
    """The underlying resource could not be reached."""


class SourceLoadError(SourceError):
    """The resource was reached but its content is unusable."""


class IntegrityError(SourceLoadError):
    """Stored secure configuration failed authentication."""


class UnsupportedSourceType(SourceError):
    """No provider implementation exists for a source descriptor."""


class WriteError(ConfigurationError):
    """A provider failed to persist configuration."""


class NoAdapterForEnvironment(ConfigurationError, LookupError):
    """No environment adapter is registered for the requested tag."""

    def __init__(self, environment: str):
        super().__init__(f"No environment adapter registered for {environment!r}")
        self.environment = environment


class Busy(ConfigurationError):
    """The mutation lock is held; the write was not applied.

    Callers are expected to retry. Writes are never queued.
    """

    def __init__(self, key: str):
        super().__init__(f"Configuration is busy; could not set {key!r}")
        self.key = key


class ListenerError(ConfigurationError):
    """A change listener raised while a change was being delivered."""

    def __init__(self, listener: Any, cause: BaseException):
        name = getattr(listener, "__qualname__", None) or repr(listener)
        super().__init__(f"Configuration change listener {name} failed: {cause}")
        self.listener = listener
        self.cause = cause


class ConfigurationKeyError(ConfigurationError, KeyError):
    """A required dotted-path key is absent from the configuration."""

    def __init__(self, key: str):
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"Configuration key not found: {self.key!r}"


class ConfigFileError(ConfigurationError, ValueError):
    """The conflux.yaml file could not be parsed."""
