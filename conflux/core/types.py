"""Type definitions for the conflux configuration system."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

ConfigValue = Union[
    str, int, float, bool, None, List["ConfigValue"], Dict[str, "ConfigValue"]
]
Configuration = Dict[str, ConfigValue]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SourceType(str, Enum):
    """Kinds of configuration source a provider can wrap."""

    FILE = "file"
    ENVIRONMENT = "environment"
    SECURE = "secure"
    REMOTE = "remote"


@dataclass(frozen=True)
class ConfigurationSource:
    """Descriptor of one named configuration source.

    Attributes:
        name: Source name, unique within one manager.
        type: Kind of provider that serves this source.
        options: Provider-specific settings, forwarded verbatim.
    """

    name: str
    type: SourceType
    options: Mapping[str, Any] = field(default_factory=dict)

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "ConfigurationSource":
        """Create a source from a flat mapping.

        ``name`` and ``type`` are taken out; an explicit ``options`` mapping is
        used as is, otherwise every remaining key becomes an option.

        Args:
            d: Mapping with at least ``name`` and ``type``.

        Returns:
            ConfigurationSource instance.

        Raises:
            ValueError: If ``name`` or ``type`` is missing or invalid.
        """
        if "name" not in d or "type" not in d:
            raise ValueError("Source must have both 'name' and 'type'")
        rest = {k: v for k, v in d.items() if k not in ("name", "type")}
        options = rest.pop("options", None)
        if options is None:
            options = rest
        return ConfigurationSource(
            name=str(d["name"]), type=SourceType(d["type"]), options=dict(options)
        )


@dataclass(frozen=True)
class CacheEntry:
    """Cached lookup result.

    Attributes:
        value: The resolved value.
        inserted_at: Clock reading taken when the value was stored.
    """

    value: ConfigValue
    inserted_at: float

    def is_stale(self, now: float, ttl: float) -> bool:
        return now - self.inserted_at > ttl


@dataclass(frozen=True)
class ConfigurationChange:
    """Notification payload delivered to change listeners.

    Attributes:
        keys: Affected dotted keys; ``["*"]`` means everything.
        timestamp: When the change was applied.
        source: Label of the operation that caused the change.
    """

    keys: List[str]
    timestamp: datetime
    source: str

    @property
    def is_full_reload(self) -> bool:
        return self.keys == ["*"]


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a configuration against an environment."""

    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class CacheStats:
    enabled: bool
    size: int
    hits: int
    misses: int


@dataclass(frozen=True)
class ConfigurationStatus:
    """Snapshot of a manager's load and cache state.

    Attributes:
        loaded: Whether at least one load has completed.
        last_load: Completion time of the most recent load.
        sources: Names of the sources that contributed to the last load.
        cache: Cache statistics.
        error_count: Cumulative count of source and hot-reload failures.
    """

    loaded: bool
    last_load: Optional[datetime]
    sources: List[str]
    cache: CacheStats
    error_count: int

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["last_load"] = self.last_load.isoformat() if self.last_load else None
        return data


@dataclass
class ManagerOptions:
    """Options that control a ConfigurationManager.

    Attributes:
        environment: Environment tag used to pick the adapter.
        enable_cache: Whether ``get`` results are cached.
        cache_ttl: Seconds a cached value stays fresh.
        enable_hot_reload: Whether to reload periodically in the background.
        hot_reload_interval: Seconds between background reloads.
    """

    environment: str = "development"
    enable_cache: bool = True
    cache_ttl: float = 60.0
    enable_hot_reload: bool = False
    hot_reload_interval: float = 5.0

    def __post_init__(self) -> None:
        if self.cache_ttl < 0:
            raise ValueError("cache_ttl must not be negative")
        if self.hot_reload_interval <= 0:
            raise ValueError("hot_reload_interval must be positive")
