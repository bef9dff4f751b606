"""
Configuration Module for the Warranty Invoice Extraction Pipeline.

This module provides centralized configuration management using YAML files.
Tunable constants (thresholds, tolerances, scoring weights, service
endpoints) live in settings.yaml, not in code. Secrets are taken from the
environment and overlaid on top of the file.
"""

import os
import yaml
from pathlib import Path
from typing import Any, Dict, Optional


# Environment variable -> dot-notation configuration key
ENV_OVERRIDES = {
    "OPENAI_API_KEY": "ai.api_key",
    "OPENAI_BASE_URL": "ai.base_url",
    "OPENAI_ASSISTANT_ID": "ai.assistant.assistant_id",
}


class ConfigurationManager:
    """
    Centralized configuration management for the extraction pipeline.

    This class handles loading and providing access to all configuration
    parameters defined in settings.yaml, with environment overrides for
    service credentials.

    Attributes:
        config_path (Path): Path to the configuration file.
        config (Dict): Loaded configuration dictionary.

    Example:
        >>> config = ConfigurationManager()
        >>> psm = config.get("ocr.tesseract.psm")
        >>> tolerance = config.get("validation.total_tolerance")
    """

    _instance: Optional['ConfigurationManager'] = None
    _config: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[str] = None) -> 'ConfigurationManager':
        # Every get_config() call reads the same loaded settings
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[str] = None) -> None:
        """
        Initialize the configuration manager.

        Args:
            config_path: Optional path to configuration file. Defaults to
                        $WARRANTY_INVOICE_CONFIG, then settings.yaml next
                        to this module.
        """
        if self._initialized:
            return

        config_path = config_path or os.environ.get("WARRANTY_INVOICE_CONFIG")
        if config_path is None:
            self.config_path = Path(__file__).parent / "settings.yaml"
        else:
            self.config_path = Path(config_path)

        self._load_config()
        self._initialized = True

    def _load_config(self) -> None:
        """
        Read settings.yaml, then overlay the environment.

        Raises:
            FileNotFoundError: If configuration file doesn't exist.
            yaml.YAMLError: If configuration file is invalid.
        """
        if not self.config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {self.config_path}"
            )

        with open(self.config_path, 'r', encoding='utf-8') as f:
            self._config = yaml.safe_load(f) or {}

        self._apply_env_overrides()

    def _apply_env_overrides(self) -> None:
        """Overlay credentials and endpoints from the environment."""
        for env_var, key in ENV_OVERRIDES.items():
            value = os.environ.get(env_var)
            if value:
                self.set(key, value)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key: Configuration key in dot notation (e.g., "ocr.tesseract.lang").
            default: Default value if key doesn't exist.

        Returns:
            Configuration value or default.

        Example:
            >>> config.get("pipeline.confidence_threshold")
            60
            >>> config.get("nonexistent.key", "default_value")
            "default_value"
        """
        keys = key.split('.')
        value = self._config

        try:
            for k in keys:
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value using dot notation.

        Intermediate sections are created when missing.

        Args:
            key: Configuration key in dot notation.
            value: Value to store.
        """
        keys = key.split('.')
        section = self._config
        for k in keys[:-1]:
            if not isinstance(section.get(k), dict):
                section[k] = {}
            section = section[k]
        section[keys[-1]] = value

    @classmethod
    def reset(cls) -> None:
        """Forget the loaded settings; the next access reloads them."""
        cls._instance = None
        cls._config = {}


def get_config(key: str, default: Any = None) -> Any:
    """Read one dot-notation setting, e.g. get_config("scoring.weights.invoice_number")."""
    return ConfigurationManager().get(key, default)


__all__ = ['ConfigurationManager', 'get_config']
