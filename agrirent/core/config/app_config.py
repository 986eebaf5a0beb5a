"""
Application configuration management.

Loads settings from a YAML file, then applies an optional .env file and
AGRIRENT_* environment overrides on top.
"""

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

ENV_PREFIX = "AGRIRENT_"


class AppConfig(BaseModel):
    """
    Runtime settings shared by the CLIs.

    Attributes:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        log_format: "json" for production, "text" for local development
        metrics_enabled: Start the Prometheus HTTP endpoint
        metrics_port: Port for the Prometheus endpoint
        snapshot_dir: Directory holding bookings/items/users JSON snapshots
        feed_path: JSON-lines change-feed file for KYC submissions
        feed_poll_interval_seconds: Delay between polls when following the feed
    """

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    metrics_enabled: bool = False
    metrics_port: int = Field(8000, ge=1, le=65535)
    snapshot_dir: Path = Path("data")
    feed_path: Path | None = None
    feed_poll_interval_seconds: float = Field(1.0, gt=0)


class AppConfigLoader:
    """
    Loads AppConfig from YAML configuration files.

    Expected YAML format:
    ```yaml
    app:
      log_level: INFO
      log_format: json
      metrics_enabled: false
      metrics_port: 8000
      snapshot_dir: data
      feed_path: data/kyc_feed.jsonl
      feed_poll_interval_seconds: 1.0
    ```

    Environment variables named AGRIRENT_<FIELD> (e.g. AGRIRENT_LOG_LEVEL)
    override values from the file.
    """

    def __init__(self, config_path: str | Path | None = None, env_file: str | Path | None = None):
        """
        Initialize the config loader.

        Args:
            config_path: YAML file; None means defaults plus environment only
            env_file: Optional dotenv file loaded before reading overrides
        """
        self.config_path = Path(config_path) if config_path else None
        if self.config_path and not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        self.env_file = Path(env_file) if env_file else None

    def load(self) -> AppConfig:
        """
        Load, merge and validate configuration.

        Raises:
            ValueError: If the YAML document or a resulting value is invalid
        """
        values = self._read_file()

        if self.env_file and self.env_file.exists():
            load_dotenv(self.env_file, override=False)
        values.update(self._read_env())

        try:
            return AppConfig(**values)
        except ValidationError as e:
            raise ValueError(f"Invalid configuration: {e}") from e

    def _read_file(self) -> dict[str, Any]:
        if not self.config_path:
            return {}

        with open(self.config_path) as f:
            config = yaml.safe_load(f)

        if config is None:
            return {}
        if not isinstance(config, dict) or "app" not in config:
            raise ValueError("Configuration file must contain an 'app' section")

        section = config["app"] or {}
        if not isinstance(section, dict):
            raise ValueError("'app' section must be a mapping")

        unknown = set(section) - set(AppConfig.model_fields)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")
        return dict(section)

    def _read_env(self) -> dict[str, str]:
        overrides = {}
        for field_name in AppConfig.model_fields:
            value = os.getenv(ENV_PREFIX + field_name.upper())
            if value is not None:
                overrides[field_name] = value
        return overrides


def load_config(config_path: str | Path | None = None, env_file: str | Path | None = None) -> AppConfig:
    """Convenience wrapper: AppConfigLoader(config_path, env_file).load()."""
    return AppConfigLoader(config_path, env_file).load()
