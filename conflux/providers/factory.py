"""Construct providers from source descriptors."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping, Optional

from ..core.errors import SourceUnavailable, UnsupportedSourceType
from ..core.provider import ConfigurationProvider
from ..core.types import ConfigurationSource, SourceType

SECRET_KEY_VARIABLE = "CONFLUX_SECRET_KEY"


class ProviderFactory:
    """Build the provider that serves a ConfigurationSource.

    Args:
        cipher: Cipher used by secure sources. When omitted, a Fernet cipher
            is built from the ``CONFLUX_SECRET_KEY`` environment variable.
        secure_storage_path: Default directory for secure sources that do
            not name their own ``storage_path``.
        environ: Environment mapping for environment-variable sources and
            the secret key lookup. Defaults to ``os.environ``.
    """

    def __init__(
        self,
        cipher: Optional[Any] = None,
        secure_storage_path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.cipher = cipher
        self.secure_storage_path = secure_storage_path
        self._environ = environ

    @property
    def environ(self) -> Mapping[str, str]:
        return self._environ if self._environ is not None else os.environ

    def create(self, source: ConfigurationSource) -> ConfigurationProvider:
        """Create a provider for ``source``.

        Raises:
            UnsupportedSourceType: If no provider handles the source.
            SourceUnavailable: If the source cannot be served in this process,
                such as a secure source without a key.
        """
        options = dict(source.options)
        if source.type == SourceType.FILE:
            from .file import FileConfigurationProvider

            path = options.get("path")
            if not path:
                raise UnsupportedSourceType("File source requires a 'path' option", source.name)
            return FileConfigurationProvider(source.name, path, format=options.get("format"))
        if source.type == SourceType.ENVIRONMENT:
            from .environment import EnvironmentVariableProvider

            return EnvironmentVariableProvider(
                source.name,
                prefix=options.get("prefix", ""),
                separator=options.get("separator", "_"),
                environ=self._environ,
            )
        if source.type == SourceType.REMOTE:
            url = str(options.get("url") or "")
            if url.startswith(("redis://", "rediss://")):
                from .redis_kv import RedisConfigurationProvider

                return RedisConfigurationProvider(
                    source.name, url, prefix=options.get("prefix", "")
                )
            if url.startswith(("http://", "https://")):
                from .remote import RemoteConfigurationProvider

                return RemoteConfigurationProvider(
                    source.name,
                    url,
                    headers=options.get("headers"),
                    timeout=float(options.get("timeout", 10.0)),
                    cache_ttl=float(options.get("cache_ttl", 60.0)),
                    retries=int(options.get("retries", 0)),
                )
            raise UnsupportedSourceType(f"Unsupported remote URL: {url!r}", source.name)
        if source.type == SourceType.SECURE:
            from .secure import EncryptedConfigStore, SecureStorageConfigurationProvider

            storage_path = options.get("storage_path") or self.secure_storage_path
            store = EncryptedConfigStore(
                Path(storage_path) if storage_path else None,
                self._secure_cipher(source.name),
            )
            return SecureStorageConfigurationProvider(
                source.name, options.get("namespace", source.name), store
            )
        raise UnsupportedSourceType(f"Unsupported source type: {source.type!r}", source.name)

    def _secure_cipher(self, source_name: str) -> Any:
        if self.cipher is not None:
            return self.cipher
        key = self.environ.get(SECRET_KEY_VARIABLE)
        if not key:
            raise SourceUnavailable(
                f"{SECRET_KEY_VARIABLE} not set and no cipher configured", source_name
            )
        from .secure import FernetCipher

        return FernetCipher(key)
