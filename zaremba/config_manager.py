"""
Configuration Manager Utility

Loads zaremba.yaml and deep-merges zaremba.local.yaml over it when present.
"""

import logging
from pathlib import Path
from typing import Dict, Any

import yaml


class ConfigManager:
    """
    Manage configuration loading with automatic local overrides.

    For a base file like 'zaremba.yaml', a 'zaremba.local.yaml' in the same
    directory is merged over it, key by key.
    """

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.ConfigManager")

    def load_config(self, config_path: str) -> Dict[str, Any]:
        """
        Load configuration from YAML file with automatic local overrides.

        Args:
            config_path: Path to base configuration file (e.g., 'zaremba.yaml')

        Returns:
            Merged configuration dictionary

        Raises:
            FileNotFoundError: If base config file doesn't exist
            yaml.YAMLError: If the base file fails to parse
        """
        config_file = Path(config_path)

        if not config_file.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {config_path}"
            )

        self.logger.debug(f"Loading base configuration from: {config_path}")
        with open(config_file, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f)

        if not config:
            self.logger.warning(f"Configuration file is empty: {config_path}")
            config = {}

        local_config_path = self._get_local_config_path(config_file)
        if not local_config_path.exists():
            self.logger.debug(f"No local configuration file found at {local_config_path}")
            return config

        self.logger.info(f"Loading local configuration overrides from: {local_config_path}")
        try:
            with open(local_config_path, 'r', encoding='utf-8') as f:
                local_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            # A broken override file shouldn't stop a long search from starting
            self.logger.error(f"Failed to parse local configuration {local_config_path}: {e}")
            return config

        if local_config:
            config = self.deep_merge(config, local_config)
        else:
            self.logger.warning(f"Local configuration file is empty: {local_config_path}")
        return config

    def _get_local_config_path(self, base_config_path: Path) -> Path:
        """'config/zaremba.yaml' -> 'config/zaremba.local.yaml'"""
        return base_config_path.parent / f"{base_config_path.stem}.local.yaml"

    def deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """
        Deep merge override dictionary into base dictionary.

        Nested dictionaries merge recursively; any other override value
        replaces the base value. Inputs are not modified.

        Example:
            base = {'search': {'batch_step': 1000, 'v_recalc_steps': 10}}
            override = {'search': {'batch_step': 50}}
            result = {'search': {'batch_step': 50, 'v_recalc_steps': 10}}
        """
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self.deep_merge(result[key], value)
            else:
                result[key] = value

        return result
