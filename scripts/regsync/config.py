"""
Configuration management for RegulationsSync.

Handles loading and accessing configuration from YAML files and environment variables.
"""

import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


class Config:
    """Configuration manager for the RegulationsSync pipeline."""

    # Default configuration values
    DEFAULTS: Dict[str, Any] = {
        "paths": {
            "base_dir": None,  # Set dynamically
            "data": "data/federalregister",
            "database": "db/regulations.db",
            "backups": "db/backups",
            "logs": "logs",
            "reports": "logs/reports",
        },
        "registry": {
            "base_url": "https://www.federalregister.gov/api/v1",
            "per_page": 1000,
            "timeout": 60,
            "user_agent": "RegulationsSync/0.1 (regulatory document ingestion)",
        },
        "index": {
            "name": "regulations",
            "batch_size": 100,
        },
        "text": {
            "article_format": "html",
        },
        "logging": {
            "level": "INFO",
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            "file_enabled": True,
        },
    }

    _instance: Optional["Config"] = None
    _config: Dict[str, Any] = {}
    _base_dir: Optional[Path] = None

    def __new__(cls) -> "Config":
        """Singleton pattern to ensure single configuration instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self) -> None:
        """Initialize configuration if not already done."""
        if self._initialized:
            return
        self._initialized = True
        self._config = copy.deepcopy(self.DEFAULTS)
        self._base_dir = self._find_base_dir()
        self._load_config_file()

    def _find_base_dir(self) -> Path:
        """Find the base directory of the RegulationsSync installation."""
        env_base = os.environ.get("REGSYNC_BASE_DIR")
        if env_base:
            return Path(env_base)

        # scripts/regsync/config.py -> scripts/regsync -> scripts -> base
        current_file = Path(__file__).resolve()
        return current_file.parent.parent.parent

    def _load_config_file(self) -> None:
        """Load configuration from YAML file if it exists."""
        config_path = self._base_dir / "config" / "config.yaml"
        if config_path.exists():
            with open(config_path, "r", encoding="utf-8") as f:
                file_config = yaml.safe_load(f) or {}
                self._merge_config(file_config)

        self._config["paths"]["base_dir"] = str(self._base_dir)

    def _merge_config(self, new_config: Dict[str, Any]) -> None:
        """Deep merge new configuration into existing configuration."""
        for key, value in new_config.items():
            if key in self._config and isinstance(self._config[key], dict) and isinstance(value, dict):
                self._config[key].update(value)
            else:
                self._config[key] = value

    def _path(self, key: str) -> Path:
        return self._base_dir / self._config["paths"][key]

    @property
    def base_dir(self) -> Path:
        """Get the base directory path."""
        return self._base_dir

    @property
    def data_dir(self) -> Path:
        """Get the directory holding downloaded metadata, bodies and text."""
        return self._path("data")

    @property
    def database_path(self) -> Path:
        """Get the database file path."""
        return self._path("database")

    @property
    def backups_dir(self) -> Path:
        """Get the backups directory path."""
        return self._path("backups")

    @property
    def logs_dir(self) -> Path:
        """Get the logs directory path."""
        return self._path("logs")

    @property
    def reports_dir(self) -> Path:
        """Get the directory run reports are written to."""
        return self._path("reports")

    @property
    def registry_url(self) -> str:
        """Base URL of the Federal Register API, without trailing slash."""
        return str(self._config["registry"]["base_url"]).rstrip("/")

    @property
    def index_name(self) -> str:
        """Name of the search index regulations are written to."""
        return self._config["index"]["name"]

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value by key.

        Supports dot notation for nested keys (e.g., 'index.batch_size').
        """
        keys = key.split(".")
        value = self._config
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def reload(self) -> None:
        """Reload configuration from file."""
        self._config = copy.deepcopy(self.DEFAULTS)
        self._load_config_file()


# Global configuration instance
config = Config()
