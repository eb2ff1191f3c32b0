"""
YAML-backed configuration management for Sparkwell.

Purpose
-------
Serve versioned, load-once configuration data (quest catalog, reward catalog,
economy tuning) through hierarchical dot-notation lookups. Values are read
from every YAML file below the configuration directory at startup and are
never mutated at runtime; changing them is a deployment-time operation.

Responsibilities
----------------
- Recursively load `*.yaml` / `*.yml` files from `Config.CONFIG_DIR`
- Deep-merge the loaded documents so configuration can be split per concern
- Resolve dot-notation keys (e.g. `"rewards.catalog"`)
- Track lightweight read metrics for observability

Non-Responsibilities
--------------------
- Environment / connection settings (handled by Config)
- Validation of catalog entries (handled by the catalog classes)
- Hot reload or database-backed overrides

Examples
--------
>>> ConfigManager.initialize()
>>> ConfigManager.get("quests.completion_bonus", 50)
50
"""

from __future__ import annotations

import copy
import time
from pathlib import Path
from typing import Any, Dict, List, MutableMapping, Optional, Union

import yaml

from sparkwell.core.config.config import Config
from sparkwell.core.exceptions import ConfigurationError
from sparkwell.core.logging.logger import get_logger

logger = get_logger(__name__)


class ConfigManager:
    """
    Load-once YAML configuration with dot-notation access.

    Class-level state; instances share the same cache, so the class itself
    or any instance may be handed to services as their config manager.
    """

    _cache: Dict[str, Any] = {}
    _initialized: bool = False
    _config_dir: Optional[Path] = None
    _loaded_files: List[str] = []

    _metrics: Dict[str, Any] = {
        "gets": 0,
        "misses": 0,
        "total_get_time_ms": 0.0,
    }

    # =========================================================================
    # YAML LOADING
    # =========================================================================

    @staticmethod
    def _deep_merge_dict(
        target: MutableMapping[str, Any],
        source: MutableMapping[str, Any],
    ) -> None:
        """Recursively merge `source` into `target` (in-place)."""
        for key, value in source.items():
            if isinstance(value, dict) and isinstance(target.get(key), dict):
                ConfigManager._deep_merge_dict(target[key], value)
            else:
                target[key] = value

    @classmethod
    def _load_yaml_configs(cls, config_dir: Path) -> Dict[str, Any]:
        """
        Recursively load all YAML files below `config_dir` into one mapping.

        Files are merged in sorted path order so the result is deterministic.

        Raises
        ------
        ConfigurationError
            If a file cannot be parsed or its root is not a mapping.
        """
        merged: Dict[str, Any] = {}

        if not config_dir.exists():
            logger.warning(
                "Config directory not found; using empty configuration",
                extra={"config_dir": str(config_dir)},
            )
            return merged

        yaml_files = sorted(
            list(config_dir.rglob("*.yaml")) + list(config_dir.rglob("*.yml"))
        )
        loaded: List[str] = []

        for yaml_file in yaml_files:
            relative = str(yaml_file.relative_to(config_dir))
            try:
                with yaml_file.open("r", encoding="utf-8") as handle:
                    data = yaml.safe_load(handle)
            except yaml.YAMLError as exc:
                logger.error(
                    "Failed to parse YAML config",
                    extra={"file": relative, "error": str(exc)},
                )
                raise ConfigurationError(relative, f"invalid YAML: {exc}") from exc

            if data is None:
                continue
            if not isinstance(data, dict):
                raise ConfigurationError(
                    relative,
                    f"root object must be a mapping, got {type(data).__name__}",
                )

            cls._deep_merge_dict(merged, data)
            loaded.append(relative)
            logger.debug("Loaded YAML config", extra={"file": relative})

        cls._loaded_files = loaded
        logger.info(
            "YAML configs loaded",
            extra={
                "config_dir": str(config_dir),
                "yaml_file_count": len(loaded),
                "top_level_keys": sorted(merged.keys()),
            },
        )
        return merged

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    @classmethod
    def initialize(cls, config_dir: Optional[Union[str, Path]] = None) -> None:
        """
        Load configuration once. Subsequent calls are no-ops.

        Args:
            config_dir: Directory to load from (defaults to Config.CONFIG_DIR)
        """
        if cls._initialized:
            logger.debug("ConfigManager already initialized; skipping")
            return
        cls.load_from(config_dir or Config.CONFIG_DIR)

    @classmethod
    def load_from(cls, config_dir: Union[str, Path]) -> None:
        """Replace the cache with the YAML documents found under `config_dir`."""
        path = Path(config_dir)
        cls._cache = cls._load_yaml_configs(path)
        cls._config_dir = path
        cls._initialized = True

    @classmethod
    def reset(cls) -> None:
        """Drop all loaded configuration (used by tests and shutdown)."""
        cls._cache = {}
        cls._initialized = False
        cls._config_dir = None
        cls._loaded_files = []
        cls._metrics = {"gets": 0, "misses": 0, "total_get_time_ms": 0.0}

    # =========================================================================
    # ACCESS
    # =========================================================================

    @classmethod
    def get(cls, key: str, default: Any = None) -> Any:
        """
        Retrieve a configuration value by dot-notation path.

        Returns a deep copy for container values so callers cannot mutate
        the shared cache.

        Examples
        --------
        >>> ConfigManager.get("rewards.version")
        '2024.1'
        >>> ConfigManager.get("missing.key", 0)
        0
        """
        start_time = time.perf_counter()
        cls._metrics["gets"] += 1

        if not cls._initialized:
            logger.warning(
                "ConfigManager accessed before explicit initialization; "
                "loading from default directory"
            )
            cls.initialize()

        try:
            value: Any = cls._cache
            for part in key.split("."):
                if isinstance(value, dict) and part in value:
                    value = value[part]
                else:
                    cls._metrics["misses"] += 1
                    return default

            if value is None:
                return default
            if isinstance(value, (dict, list)):
                return copy.deepcopy(value)
            return value
        finally:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            cls._metrics["total_get_time_ms"] += elapsed_ms

    @classmethod
    def get_int(cls, key: str, default: int = 0) -> int:
        """Retrieve an integer value, raising ConfigurationError if malformed."""
        value = cls.get(key, default)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigurationError(key, f"expected integer, got {value!r}")
        return value

    @classmethod
    def get_all_keys(cls) -> List[str]:
        """Return all top-level configuration keys currently loaded."""
        return list(cls._cache.keys())

    @classmethod
    def health_snapshot(cls) -> Dict[str, Any]:
        """Return a small, serializable view of the manager state."""
        return {
            "initialized": cls._initialized,
            "config_dir": str(cls._config_dir) if cls._config_dir else None,
            "loaded_files": list(cls._loaded_files),
            "top_level_keys": cls.get_all_keys(),
            **cls._metrics,
        }
