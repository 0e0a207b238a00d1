"""Configuration loading and validation."""

import logging
import os
import sys
import yaml
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass, field, fields

from vidyeet_bridge.domain.exceptions import ConfigurationError
from vidyeet_bridge.shared.logging import get_logger

logger = get_logger(__name__)

CLI_EXECUTABLE = "vidyeet-cli.exe" if os.name == "nt" else "vidyeet-cli"

TRUTHY = ("true", "1", "yes")


def resolve_cli_path(dev: Optional[bool] = None, base_dir: Optional[Path] = None) -> Path:
    """
    Locate the bundled CLI binary.

    - Development: ``<cwd>/bin/<executable>``
    - Packaged: ``bin/<executable>`` next to the frozen bundle, or under
      the interpreter prefix for a regular install

    Args:
        dev: Force development mode (default: VIDYEET_DEV)
        base_dir: Override the directory ``bin/`` is looked up in
    """
    if dev is None:
        dev = os.getenv("VIDYEET_DEV", "").lower() in TRUTHY

    if base_dir is None:
        if dev:
            base_dir = Path.cwd()
        elif getattr(sys, "frozen", False):
            base_dir = Path(getattr(sys, "_MEIPASS", Path(sys.executable).parent))
        else:
            base_dir = Path(sys.prefix)

    return Path(base_dir) / "bin" / CLI_EXECUTABLE


@dataclass
class BridgeConfig:
    """Read-only settings shared by every invocation."""

    cli_path: Path = field(default_factory=resolve_cli_path)

    # Seconds
    default_timeout: float = 30.0
    upload_timeout: float = 3600.0
    poll_interval: float = 0.05
    kill_grace: float = 5.0

    log_level: str = "INFO"
    log_file: Optional[Path] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.cli_path = Path(self.cli_path)
        if self.log_file is not None:
            self.log_file = Path(self.log_file)
        self._validate()

    def _validate(self):
        """Validate configuration values."""
        for name in ("default_timeout", "upload_timeout", "poll_interval"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or value <= 0:
                raise ConfigurationError(f"{name} must be a positive number of seconds, got: {value!r}")

        if not isinstance(self.kill_grace, (int, float)) or self.kill_grace < 0:
            raise ConfigurationError(f"kill_grace cannot be negative, got: {self.kill_grace!r}")

        self.log_level = str(self.log_level).upper()
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ConfigurationError(f"Invalid log_level: {self.log_level}")


class ConfigLoader:
    """Loads configuration from a YAML file, environment variables and overrides."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize config loader.

        Args:
            config_path: Optional path to YAML config file
        """
        self.config_path = Path(config_path) if config_path else Path("vidyeet.yaml")
        self._logger = get_logger(__name__)

    def load(self, overrides: Optional[Dict[str, Any]] = None) -> BridgeConfig:
        """
        Load configuration from file and environment.

        Precedence: overrides > environment > YAML file > defaults.

        Returns:
            BridgeConfig instance

        Raises:
            ConfigurationError: If configuration is invalid
        """
        config_dict: Dict[str, Any] = {}

        if self.config_path.exists():
            self._logger.info(f"Loading config from {self.config_path}")
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    yaml_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {self.config_path}: {e}") from e
            if not isinstance(yaml_config, dict):
                raise ConfigurationError(f"{self.config_path} must contain a mapping")
            config_dict.update(yaml_config)
        else:
            self._logger.debug(f"Config file not found: {self.config_path}")

        config_dict.update(self._load_from_env())

        if overrides:
            for k, v in overrides.items():
                if v is None:
                    continue
                config_dict[k] = v

        valid_fields = {f.name for f in fields(BridgeConfig)}
        unknown = set(config_dict) - valid_fields
        if unknown:
            self._logger.warning(f"Ignoring unknown config keys: {', '.join(sorted(unknown))}")
        filtered_config = {k: v for k, v in config_dict.items() if k in valid_fields}

        try:
            return BridgeConfig(**filtered_config)
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}")

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        env_config: Dict[str, Any] = {}

        if cli_path := os.getenv("VIDYEET_CLI_PATH"):
            env_config["cli_path"] = Path(cli_path)

        for var, key in (
            ("VIDYEET_TIMEOUT", "default_timeout"),
            ("VIDYEET_UPLOAD_TIMEOUT", "upload_timeout"),
        ):
            if raw := os.getenv(var):
                try:
                    env_config[key] = float(raw)
                except ValueError:
                    self._logger.warning(f"Invalid {var} value: {raw}")

        if log_level := os.getenv("VIDYEET_LOG_LEVEL"):
            env_config["log_level"] = log_level

        if log_file := os.getenv("VIDYEET_LOG_FILE"):
            env_config["log_file"] = Path(log_file)

        return env_config
