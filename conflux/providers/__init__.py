"""Configuration provider implementations.

This package contains the providers the manager drives: files (JSON and
YAML), process environment variables, encrypted secure storage, and remote
sources (HTTP and Redis). ProviderFactory builds them from source
descriptors and imports the concrete modules lazily.
"""

from .factory import ProviderFactory

__all__ = [
    "ProviderFactory",
]
