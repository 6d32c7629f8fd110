"""Configuration management for typearch-guard."""

from pathlib import Path
from typing import Any, Optional

import yaml

from .errors import ConfigError

CONFIG_FILE_NAME = ".typearch-guard.yaml"

DEFAULT_VALIDATOR_NAMESPACES = ("Type", "z")


class Config:
    """Load and manage typearch-guard configuration from .typearch-guard.yaml."""

    def __init__(self, project_root: Optional[Path] = None):
        """Initialize configuration with defaults.

        Args:
            project_root: Project root directory to search for config file.
                         If None, uses current working directory.

        Raises:
            ConfigError: if the config file exists but is invalid
        """
        # Default configuration values
        self.checks: Optional[list[str]] = None  # None means every check
        self.exclude: list[str] = []
        self.allow_exports: list[str] = []
        self.validator_namespaces: list[str] = list(DEFAULT_VALIDATOR_NAMESPACES)
        self.jobs: int = 1

        config_dir = project_root if project_root else Path.cwd()
        self.config_file = config_dir / CONFIG_FILE_NAME
        self._load_from_yaml(self.config_file)

    def _load_from_yaml(self, config_file: Path) -> None:
        """Load configuration from .typearch-guard.yaml file.

        Args:
            config_file: Path of the YAML file; a missing file keeps defaults
        """
        if not config_file.exists():
            return  # No config file - use defaults

        try:
            with open(config_file, encoding="utf-8") as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"{CONFIG_FILE_NAME} is not valid YAML: {e}") from e
        except OSError as e:
            raise ConfigError(f"Cannot read {CONFIG_FILE_NAME}: {e}") from e

        if not config:
            return  # Empty config file - use defaults

        if not isinstance(config, dict):
            raise ConfigError(f"{CONFIG_FILE_NAME} must contain a mapping")

        if "checks" in config:
            self.checks = self._string_list(config, "checks")
        if "exclude" in config:
            self.exclude = self._string_list(config, "exclude")
        if "allow_exports" in config:
            self.allow_exports = self._string_list(config, "allow_exports")
        if "validator_namespaces" in config:
            self.validator_namespaces = self._string_list(config, "validator_namespaces")

        if "jobs" in config:
            jobs = config["jobs"]
            if not isinstance(jobs, int) or isinstance(jobs, bool) or jobs < 1:
                raise ConfigError(f"{CONFIG_FILE_NAME}: 'jobs' must be a positive integer")
            self.jobs = jobs

    @staticmethod
    def _string_list(config: dict[str, Any], key: str) -> list[str]:
        value = config[key]
        if value is None:
            return []
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ConfigError(f"{CONFIG_FILE_NAME}: '{key}' must be a list of strings")
        return list(value)
