"""Dotted-path addressing for nested configuration trees."""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple


class _Missing:
    """Sentinel for a path that does not resolve."""

    _instance: Optional["_Missing"] = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def split_key(key: str) -> List[str]:
    """Split a dotted key into its segments.

    Raises:
        ValueError: If the key is empty or has an empty segment.
    """
    if not isinstance(key, str) or not key:
        raise ValueError("Configuration key must be a non-empty string")
    parts = key.split(".")
    if any(not part for part in parts):
        raise ValueError(f"Invalid configuration key: {key!r}")
    return parts


def is_valid_key(key: Any) -> bool:
    """Whether ``key`` is a non-empty dotted key with no empty segment."""
    return isinstance(key, str) and bool(key) and all(key.split("."))


def get_path(data: Mapping[str, Any], key: str) -> Any:
    """Resolve a dotted key, returning ``MISSING`` when it does not exist.

    Walking through a value that is not a mapping is treated as absence.
    """
    node: Any = data
    for part in split_key(key):
        if not isinstance(node, dict) or part not in node:
            return MISSING
        node = node[part]
    return node


def set_path(data: Dict[str, Any], key: str, value: Any) -> Dict[str, Any]:
    """Return a copy of ``data`` with ``value`` written at ``key``.

    Only the mappings along the path are copied; siblings are shared with
    the original tree. Missing or non-mapping intermediates are replaced by
    fresh mappings.
    """
    parts = split_key(key)
    root = dict(data)
    node = root
    for part in parts[:-1]:
        child = node.get(part)
        child = dict(child) if isinstance(child, dict) else {}
        node[part] = child
        node = child
    node[parts[-1]] = value
    return root


def is_prefix(prefix: str, key: str) -> bool:
    """Whether ``prefix`` names a strict ancestor of ``key``."""
    return key.startswith(prefix + ".")


def iter_hierarchical(
    data: Mapping[str, Any],
    parent: str = "",
    depth: Optional[int] = None,
) -> Iterator[Tuple[str, Any]]:
    """Flatten nested mappings using dot-notation.

    Lists are emitted as-is. Empty mappings are emitted as leaves so they
    survive a flatten/unflatten cycle.

    Args:
        data: Mapping to flatten.
        parent: Parent key prefix for recursion.
        depth: Maximum depth to flatten (None for unlimited).

    Yields:
        Tuples of (flattened_key, value).
    """
    if depth is not None and depth < 0:
        return

    for key, value in data.items():
        full_key = key if not parent else f"{parent}.{key}"
        if isinstance(value, dict) and value and (depth is None or depth > 0):
            next_depth = None if depth is None else depth - 1
            yield from iter_hierarchical(value, full_key, next_depth)
        else:
            yield full_key, value


def unflatten(flat: Mapping[str, Any]) -> Dict[str, Any]:
    """Build a nested tree from dotted keys, in sorted key order.

    A key that collides with an existing scalar or mapping at the same
    position is skipped.
    """
    tree: Dict[str, Any] = {}
    for key in sorted(flat):
        parts = key.split(".")
        node = tree
        for part in parts[:-1]:
            child = node.setdefault(part, {})
            if not isinstance(child, dict):
                break
            node = child
        else:
            if parts[-1] not in node:
                node[parts[-1]] = flat[key]
    return tree
