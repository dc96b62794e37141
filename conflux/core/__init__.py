from .adapter import AdapterRegistry, EnvironmentAdapter, EnvironmentType
from .config_loader import ConfigLoader
from .errors import (
    Busy,
    ConfigFileError,
    ConfigurationError,
    ConfigurationKeyError,
    IntegrityError,
    ListenerError,
    NoAdapterForEnvironment,
    SourceError,
    SourceLoadError,
    SourceUnavailable,
    UnsupportedSourceType,
    WriteError,
)
from .manager import ConfigurationManager
from .provider import ConfigurationProvider
from .types import (
    CacheStats,
    ConfigurationChange,
    ConfigurationSource,
    ConfigurationStatus,
    ManagerOptions,
    SourceType,
    ValidationResult,
)

__all__ = [
    "AdapterRegistry",
    "Busy",
    "CacheStats",
    "ConfigFileError",
    "ConfigLoader",
    "ConfigurationChange",
    "ConfigurationError",
    "ConfigurationKeyError",
    "ConfigurationManager",
    "ConfigurationProvider",
    "ConfigurationSource",
    "ConfigurationStatus",
    "EnvironmentAdapter",
    "EnvironmentType",
    "IntegrityError",
    "ListenerError",
    "ManagerOptions",
    "NoAdapterForEnvironment",
    "SourceError",
    "SourceLoadError",
    "SourceType",
    "SourceUnavailable",
    "UnsupportedSourceType",
    "ValidationResult",
    "WriteError",
]
