"""Configuration management for org-chart using YAML files."""

from pathlib import Path
from typing import Any

import structlog
import yaml

from org_chart.layout import LayoutOptions

logger = structlog.get_logger()

CONFIG_DIR_NAME = ".org-chart"

DEFAULTS: dict[str, Any] = {
    "backend": "yaml",
    "yaml.path": f"{CONFIG_DIR_NAME}/employees.yaml",
    "http.timeout": "10",
    "layout.algorithm": "layered",
    "layout.direction": "DOWN",
    "layout.spacing": "50",
    "layout.layer_spacing": "80",
}


class Config:
    """Configuration manager using YAML file storage.

    Local config lives in ``.org-chart/config.yaml`` in the current directory,
    global config in ``~/.org-chart/config.yaml``. Reads check local config,
    then global config, then the built-in defaults.
    """

    def __init__(
        self,
        use_global: bool = False,
        config_dir: Path | None = None,
        global_dir: Path | None = None,
    ) -> None:
        """Initialize configuration manager.

        Args:
            use_global: If True, use global config only. If False, use local config with global fallback.
            config_dir: Custom directory to store config file (overrides use_global)
            global_dir: Custom global config directory (defaults to ~/.org-chart)
        """
        self.global_dir = Path(global_dir) if global_dir is not None else Path.home() / CONFIG_DIR_NAME

        if config_dir is not None:
            self.config_dir = Path(config_dir)
            self.is_global = use_global
        elif use_global:
            self.config_dir = self.global_dir
            self.is_global = True
        else:
            self.config_dir = Path.cwd() / CONFIG_DIR_NAME
            self.is_global = False

        self.config_file = self.config_dir / "config.yaml"
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self._config: dict[str, Any] = self._load()

        self._global_config: dict[str, Any] = {}
        if not self.is_global:
            global_config_file = self.global_dir / "config.yaml"
            if global_config_file.exists():
                try:
                    with open(global_config_file, "r") as f:
                        self._global_config = yaml.safe_load(f) or {}
                except (OSError, yaml.YAMLError) as e:
                    logger.warning("Failed to load global config", error=str(e))

        logger.debug("Config initialized", config_file=str(self.config_file), is_global=self.is_global)

    def _load(self) -> dict[str, Any]:
        """Load configuration from YAML file.

        Returns:
            Configuration dictionary
        """
        if not self.config_file.exists():
            logger.debug("Config file does not exist, initializing empty config")
            return {}

        try:
            with open(self.config_file, "r") as f:
                config = yaml.safe_load(f) or {}
                logger.debug("Config loaded successfully", keys=list(config.keys()))
                return config
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to load config", error=str(e))
            raise ValueError(f"Failed to load config from {self.config_file}: {e}") from e

    def _save(self) -> None:
        """Save configuration to YAML file."""
        try:
            with open(self.config_file, "w") as f:
                yaml.safe_dump(self._config, f, default_flow_style=False, sort_keys=False)
            logger.debug("Config saved successfully")
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to save config", error=str(e))
            raise ValueError(f"Failed to save config to {self.config_file}: {e}") from e

    def get(self, key: str, default: str | None = None) -> str | None:
        """Get a configuration value.

        Args:
            key: Configuration key
            default: Value returned when the key is set nowhere, overriding the built-in default

        Returns:
            Configuration value or default
        """
        if key in self._config:
            logger.debug("Getting config value from local", key=key)
            return self._config[key]

        if not self.is_global and key in self._global_config:
            logger.debug("Getting config value from global", key=key)
            return self._global_config[key]

        if default is not None:
            return default
        logger.debug("Config value not set, using default", key=key)
        return DEFAULTS.get(key)

    def get_float(self, key: str) -> float:
        """Get a numeric configuration value.

        Raises:
            ValueError: if the value is missing or not a number
        """
        value = self.get(key)
        try:
            return float(value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Config value {key} must be a number, got {value!r}") from e

    def set(self, key: str, value: str) -> None:
        """Set a configuration value.

        Args:
            key: Configuration key
            value: Configuration value
        """
        logger.debug("Setting config value", key=key)
        self._config[key] = value
        self._save()

    def unset(self, key: str) -> None:
        """Remove a configuration value.

        Args:
            key: Configuration key
        """
        logger.debug("Unsetting config value", key=key)
        if key in self._config:
            del self._config[key]
            self._save()

    def list(self) -> dict[str, str]:
        """List all explicitly set configuration values.

        For local config, merges global config with local config (local takes precedence).
        """
        if self.is_global:
            logger.debug("Listing global config values", count=len(self._config))
            return self._config.copy()

        merged = self._global_config.copy()
        merged.update(self._config)
        logger.debug("Listing merged config values", count=len(merged))
        return merged

    def layout_options(self) -> LayoutOptions:
        """Build layout engine options from the ``layout.*`` keys."""
        return LayoutOptions(
            algorithm=str(self.get("layout.algorithm")),
            direction=str(self.get("layout.direction")).upper(),
            spacing=self.get_float("layout.spacing"),
            layer_spacing=self.get_float("layout.layer_spacing"),
        )


def get_config(use_global: bool = False) -> Config:
    """Get a configuration instance.

    Args:
        use_global: If True, return global config. If False, return local config with global fallback.

    Returns:
        Config instance
    """
    return Config(use_global=use_global)
