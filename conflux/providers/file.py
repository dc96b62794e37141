"""JSON and YAML file configuration provider."""

from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml

from ..core.errors import SourceLoadError, SourceUnavailable, WriteError
from ..core.merge import normalize_configuration
from ..core.provider import ConfigurationProvider
from ..core.types import Configuration

logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"

_FORMATS = {".json": "json", ".yaml": "yaml", ".yml": "yaml"}


class FileConfigurationProvider(ConfigurationProvider):
    """Configuration provider for a JSON or YAML file.

    The parsed file is cached and re-read only when its modification time
    changes. The path ``":memory:"`` keeps the configuration in process
    memory instead of on disk; it starts empty and holds whatever was last
    saved.
    """

    def __init__(
        self,
        name: str,
        path: Union[str, Path],
        format: Optional[str] = None,
    ):
        """Initialize FileConfigurationProvider.

        Args:
            name: Provider name.
            path: File path, or ``":memory:"``.
            format: ``json``, ``yaml`` or ``yml``. Inferred from the file
                suffix when omitted, falling back to JSON.
        """
        self.name = name
        self.in_memory = str(path) == MEMORY_PATH
        self.path = Path(path)
        self.format = self._resolve_format(format)
        self._cache: Optional[Configuration] = None
        self._stamp: Optional[Tuple[int, int]] = None

    def _resolve_format(self, format: Optional[str]) -> str:
        if format:
            fmt = format.lower()
            if fmt == "yml":
                fmt = "yaml"
            if fmt not in ("json", "yaml"):
                raise ValueError(f"Unsupported configuration format: {format}")
            return fmt
        return _FORMATS.get(self.path.suffix.lower(), "json")

    def get_name(self) -> str:
        return self.name

    def is_available(self) -> bool:
        if self.in_memory:
            return True
        try:
            return self.path.is_file()
        except OSError:
            return False

    def load(self) -> Configuration:
        if self.in_memory:
            return copy.deepcopy(self._cache) if self._cache is not None else {}
        try:
            stamp = _stamp(self.path.stat())
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise SourceUnavailable(f"Cannot stat {self.path}: {exc}", self.name) from exc

        if self._cache is not None and self._stamp == stamp:
            return copy.deepcopy(self._cache)

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                content = f.read()
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise SourceUnavailable(f"Cannot read {self.path}: {exc}", self.name) from exc

        data = self._parse(content)
        self._cache = normalize_configuration(data, self.name)
        self._stamp = stamp
        logger.debug("Loaded %s configuration from %s", self.format, self.path)
        return copy.deepcopy(self._cache)

    def _parse(self, content: str) -> Any:
        try:
            if self.format == "json":
                return json.loads(content) if content.strip() else {}
            return yaml.safe_load(content) or {}
        except (json.JSONDecodeError, yaml.YAMLError) as exc:
            raise SourceLoadError(
                f"Failed to parse {self.path} as {self.format}: {exc}", self.name
            ) from exc

    def save(self, config: Configuration) -> None:
        try:
            data: Dict[str, Any] = normalize_configuration(config, self.name)
        except SourceLoadError as exc:
            raise WriteError(f"Cannot save configuration to {self.path}: {exc}") from exc
        if self.in_memory:
            self._cache = copy.deepcopy(data)
            return
        if self.format == "json":
            content = json.dumps(data, indent=2) + "\n"
        else:
            content = yaml.safe_dump(data, sort_keys=False)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(content)
                os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as exc:
            raise WriteError(f"Failed to save configuration to {self.path}: {exc}") from exc
        self._cache = copy.deepcopy(data)
        self._stamp = _stamp(self.path.stat())


def _stamp(st: os.stat_result) -> Tuple[int, int]:
    # A rewrite within the same mtime tick is seen only if the size changed.
    return (st.st_mtime_ns, st.st_size)
