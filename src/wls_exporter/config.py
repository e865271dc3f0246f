"""
Exporter configuration, loaded from YAML:

    metricsNameSnakeCase: true
    queries:
    - applicationRuntimes:
        key: name
        componentRuntimes:
          prefix: webapp_config_
          key: name
          values: [openSessionsCurrentCount, sessionsOpenedTotalCount]

Each entry under `queries` is an independent selector tree. The live
configuration swaps whole snapshots, so a scrape that already picked one
up never sees a mix of old and new selectors.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml

from wls_exporter.engine.selector import SelectorNode
from wls_exporter.errors import ConfigurationError

log = logging.getLogger(__name__)

SNAKE_CASE = "metricsNameSnakeCase"
QUERIES = "queries"


@dataclass(frozen=True)
class ExporterConfig:
    metrics_name_snake_case: bool = False
    queries: Tuple[SelectorNode, ...] = ()

    def has_queries(self) -> bool:
        return bool(self.queries)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ExporterConfig":
        """Build a config from a parsed YAML document. Unknown keys are ignored."""
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise ConfigurationError("configuration must be a mapping")

        snake_case = data.get(SNAKE_CASE, False)
        if not isinstance(snake_case, bool):
            raise ConfigurationError(f"'{SNAKE_CASE}' must be true or false")

        raw_queries = data.get(QUERIES) or []
        if not isinstance(raw_queries, list):
            raise ConfigurationError(f"'{QUERIES}' must be a list of selectors")

        queries = tuple(
            SelectorNode.from_dict(query, path=f"{QUERIES}[{i}]")
            for i, query in enumerate(raw_queries)
        )
        return cls(metrics_name_snake_case=snake_case, queries=queries)

    @classmethod
    def from_yaml(cls, text: Union[str, bytes]) -> "ExporterConfig":
        """Parse a YAML document. Bytes are decoded by PyYAML, which detects the encoding."""
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"invalid YAML: {e}") from e
        return cls.from_dict(data)


class LiveConfiguration:
    """The configuration currently in force, reloaded when its file changes."""

    def __init__(self, path: Optional[str] = None):
        self._lock = threading.Lock()
        self._path = Path(path) if path else None
        self._mtime: Optional[float] = None
        self._config: Optional[ExporterConfig] = None
        self._error: Optional[str] = None

        if self._path:
            self.refresh()

    @property
    def path(self) -> Optional[Path]:
        return self._path

    def snapshot(self) -> Tuple[Optional[ExporterConfig], Optional[str]]:
        """The active config and the last load error, read together."""
        with self._lock:
            return self._config, self._error

    def load_string(self, text: str):
        self._install(*self._parse(text, "<string>"))

    def load_file(self, path: str):
        with self._lock:
            self._path = Path(path)
            self._mtime = None
        self.refresh()

    def refresh(self) -> bool:
        """Reload the file if it changed since the last load. Returns True on reload."""
        path = self._path
        if path is None:
            return False

        try:
            mtime = path.stat().st_mtime
        except FileNotFoundError:
            log.warning("Configuration file %s not found", path)
            self._install(None, None, mtime=None)
            return False

        if mtime == self._mtime:
            return False

        try:
            text = path.read_bytes()
        except OSError as e:
            log.error("Unable to read configuration file %s: %s", path, e)
            self._install(None, f"unable to read {path}: {e}", mtime=None)
            return False

        config, error = self._parse(text, str(path))
        self._install(config, error, mtime=mtime)
        if config is not None:
            log.info("Loaded configuration from %s (%d queries)", path, len(config.queries))
        return True

    def _parse(self, text: Union[str, bytes], source: str) -> Tuple[Optional[ExporterConfig], Optional[str]]:
        try:
            return ExporterConfig.from_yaml(text), None
        except ConfigurationError as e:
            log.error("Unable to load configuration from %s: %s", source, e)
            return None, str(e)

    def _install(self, config: Optional[ExporterConfig], error: Optional[str], mtime: Optional[float] = None):
        with self._lock:
            self._config = config
            self._error = error
            self._mtime = mtime
