"""Merging logic for multiple configuration sources."""

from __future__ import annotations

import collections.abc
import copy
from typing import Any, Dict, Iterable, Mapping, Optional

from .errors import SourceLoadError
from .types import Configuration, ConfigValue


def normalize_value(value: Any, path: str = "") -> ConfigValue:
    """Coerce a value into the configuration value union.

    Mappings are rebuilt with string keys, tuples become lists, and every
    nested value is checked recursively.

    Raises:
        TypeError: If the value (or anything nested in it) is not a string,
            number, boolean, None, sequence or string-keyed mapping.
    """
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, collections.abc.Mapping):
        result: Dict[str, ConfigValue] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"Non-string key {key!r} at {path or '<root>'}")
            child = f"{path}.{key}" if path else key
            result[key] = normalize_value(item, child)
        return result
    if isinstance(value, (list, tuple)):
        return [normalize_value(item, f"{path}[{i}]") for i, item in enumerate(value)]
    raise TypeError(
        f"Unsupported configuration value of type {type(value).__name__} "
        f"at {path or '<root>'}"
    )


def normalize_configuration(data: Any, source: Optional[str] = None) -> Configuration:
    """Validate provider output and return it as a fresh Configuration.

    ``None`` is treated as an empty configuration.

    Raises:
        SourceLoadError: If the data is not a mapping or holds values outside
            the configuration value union.
    """
    if data is None:
        return {}
    if not isinstance(data, collections.abc.Mapping):
        raise SourceLoadError(
            f"Source returned {type(data).__name__}, expected a mapping", source
        )
    try:
        normalized = normalize_value(data)
    except TypeError as exc:
        raise SourceLoadError(str(exc), source) from exc
    assert isinstance(normalized, dict)
    return normalized


def deep_merge(target: Dict[str, Any], overlay: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge ``overlay`` into ``target`` in place and return ``target``.

    Mappings present on both sides merge recursively; any other overlapping
    value (scalars, sequences, or a mapping meeting a non-mapping) is
    replaced by the overlay's value. Values taken from the overlay are
    copied so the result shares no structure with it.
    """
    for key, value in overlay.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            deep_merge(current, value)
        else:
            target[key] = copy.deepcopy(value)
    return target


def merge_configurations(configs: Iterable[Mapping[str, Any]]) -> Configuration:
    """Merge configurations in order; later configurations win.

    Args:
        configs: Configurations ordered from lowest to highest precedence.

    Returns:
        A new merged configuration.
    """
    merged: Configuration = {}
    for config in configs:
        deep_merge(merged, config)
    return merged


def fill_missing(config: Mapping[str, Any], defaults: Mapping[str, Any]) -> Configuration:
    """Return a copy of ``config`` with absent keys taken from ``defaults``.

    Existing keys are never overwritten. When both sides hold a mapping for
    the same key the fill recurses into it. ``config`` is not mutated.
    """
    result: Configuration = copy.deepcopy(dict(config))
    _fill(result, defaults)
    return result


def _fill(target: Dict[str, Any], defaults: Mapping[str, Any]) -> None:
    for key, value in defaults.items():
        if key not in target:
            target[key] = copy.deepcopy(value)
        elif isinstance(target[key], dict) and isinstance(value, dict):
            _fill(target[key], value)
