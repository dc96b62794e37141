"""Encrypted on-disk configuration storage.

Encryption and authentication are delegated to a ``PayloadCipher``. The
default ``FernetCipher`` uses ``cryptography``'s Fernet tokens, which are
AES-CBC encrypted and HMAC-SHA256 authenticated, so a tampered or
wrongly-keyed payload fails to decrypt.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Protocol, Union

from cryptography.fernet import Fernet, InvalidToken

from ..core.errors import IntegrityError, SourceLoadError, SourceUnavailable, WriteError
from ..core.merge import normalize_configuration
from ..core.provider import ConfigurationProvider
from ..core.types import Configuration, utcnow

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_PATH = Path(tempfile.gettempdir()) / "conflux-secure-storage"

_UNSAFE_KEY_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


class PayloadCipher(Protocol):
    def encrypt(self, data: bytes) -> bytes:
        ...

    def decrypt(self, token: bytes) -> bytes:
        """Decrypt and authenticate ``token``.

        Raises:
            IntegrityError: If the token is corrupt or was made with another key.
        """
        ...


class FernetCipher:
    """PayloadCipher backed by ``cryptography.fernet``."""

    def __init__(self, key: Union[str, bytes]):
        self._fernet = Fernet(key)

    @staticmethod
    def generate_key() -> str:
        return Fernet.generate_key().decode("ascii")

    def encrypt(self, data: bytes) -> bytes:
        return self._fernet.encrypt(data)

    def decrypt(self, token: bytes) -> bytes:
        try:
            return self._fernet.decrypt(token)
        except InvalidToken as exc:
            raise IntegrityError("Configuration integrity verification failed") from exc


class EncryptedConfigStore:
    """Keyed store of encrypted configuration envelopes.

    Each key is kept in ``<storage_path>/<sanitized key>.conf`` as JSON
    ``{"payload": <token>, "timestamp": <ISO-8601>}``.
    """

    def __init__(self, storage_path: Optional[Path], cipher: PayloadCipher):
        self.storage_path = Path(storage_path) if storage_path else DEFAULT_STORAGE_PATH
        self.cipher = cipher

    def _file_path(self, key: str) -> Path:
        return self.storage_path / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.conf"

    def load(self, key: str) -> Optional[Configuration]:
        """Load and decrypt the configuration stored under ``key``.

        Returns:
            The configuration, or None if nothing is stored under the key.

        Raises:
            IntegrityError: If the payload fails authentication.
            SourceLoadError: If the envelope or decrypted payload is malformed.
            SourceUnavailable: If the file exists but cannot be read.
        """
        path = self._file_path(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise SourceUnavailable(f"Cannot read {path}: {exc}") from exc
        try:
            envelope = json.loads(raw)
            token = envelope["payload"].encode("ascii")
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise SourceLoadError(f"Malformed secure configuration envelope {path}") from exc
        plaintext = self.cipher.decrypt(token)
        try:
            data = json.loads(plaintext.decode("utf-8"))
        except ValueError as exc:
            raise SourceLoadError(f"Decrypted configuration in {path} is not JSON") from exc
        return normalize_configuration(data)

    def save(self, key: str, config: Configuration) -> None:
        path = self._file_path(key)
        try:
            token = self.cipher.encrypt(json.dumps(config).encode("utf-8"))
            envelope = {"payload": token.decode("ascii"), "timestamp": utcnow().isoformat()}
            self.storage_path.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(".conf.tmp")
            tmp.write_text(json.dumps(envelope, indent=2), encoding="utf-8")
            os.replace(tmp, path)
        except (OSError, TypeError, ValueError) as exc:
            raise WriteError(f"Failed to save secure configuration: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            self._file_path(key).unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise WriteError(f"Failed to delete configuration: {exc}") from exc

    def list(self) -> List[str]:
        if not self.storage_path.is_dir():
            return []
        return sorted(p.stem for p in self.storage_path.glob("*.conf"))

    def timestamp(self, key: str) -> Optional[datetime]:
        """When ``key`` was last saved, read from its envelope."""
        try:
            envelope = json.loads(self._file_path(key).read_text(encoding="utf-8"))
            return datetime.fromisoformat(envelope["timestamp"])
        except (OSError, ValueError, KeyError, TypeError):
            return None


class SecureStorageConfigurationProvider(ConfigurationProvider):
    """Configuration provider over one namespace of an EncryptedConfigStore."""

    def __init__(self, name: str, namespace: str, store: EncryptedConfigStore):
        self.name = name
        self.namespace = namespace
        self.store = store

    def get_name(self) -> str:
        return self.name

    def is_available(self) -> bool:
        sample = b"conflux-check"
        try:
            if self.store.cipher.decrypt(self.store.cipher.encrypt(sample)) != sample:
                return False
            self.store.storage_path.mkdir(parents=True, exist_ok=True)
            return os.access(self.store.storage_path, os.W_OK | os.R_OK)
        except Exception as exc:
            logger.debug("Secure storage %s unavailable: %s", self.name, exc)
            return False

    def load(self) -> Configuration:
        try:
            data = self.store.load(self.namespace)
        except (SourceLoadError, SourceUnavailable) as exc:
            exc.source = self.name
            raise
        return data or {}

    def save(self, config: Configuration) -> None:
        self.store.save(self.namespace, config)

    def clear(self) -> None:
        self.store.delete(self.namespace)
