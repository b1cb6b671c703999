"""
Configuration management for the signaling relay.

All settings come from the process environment, optionally seeded from a
``.env`` file. The only setting most deployments touch is ``PORT``.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from ..infrastructure.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000
DEFAULT_PING_INTERVAL = 20
DEFAULT_MAX_MESSAGE_SIZE = 2**20
DEFAULT_MAX_CONNECTIONS = 1000


@dataclass
class RelayConfig:
    """Runtime configuration for the signaling relay server."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    # None picks the level from ENVIRONMENT
    log_level: Optional[str] = None
    log_file: Optional[str] = None

    # WebSocket transport tuning
    ping_interval: int = DEFAULT_PING_INTERVAL
    max_message_size: int = DEFAULT_MAX_MESSAGE_SIZE
    max_connections: int = DEFAULT_MAX_CONNECTIONS

    def __post_init__(self):
        """Validate ranges after construction."""
        if not 0 <= self.port <= 65535:
            raise ConfigurationError(f"Port out of range: {self.port}")
        if self.ping_interval < 0:
            raise ConfigurationError("PING_INTERVAL must not be negative")
        if self.max_message_size <= 0:
            raise ConfigurationError("MAX_MESSAGE_SIZE must be positive")
        if self.max_connections <= 0:
            raise ConfigurationError("MAX_CONNECTIONS must be positive")
        if self.log_level is None:
            return
        self.log_level = self.log_level.upper()
        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ConfigurationError(f"Unknown log level: {self.log_level}")


class RelayConfigManager:
    """Loads RelayConfig from the environment."""

    def __init__(self, env_file_path: str = ".env"):
        """
        Initialize configuration manager.

        Args:
            env_file_path: Path to environment file
        """
        self.env_file_path = env_file_path
        self._load_environment()

    def _load_environment(self):
        """Load environment variables from file, without overriding the process env."""
        if os.path.exists(self.env_file_path):
            load_dotenv(dotenv_path=self.env_file_path, override=False)
            logger.info(f"Loaded environment from {self.env_file_path}")
        else:
            logger.debug(f"Environment file {self.env_file_path} not found")

    def _get_optional_env(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """
        Get optional environment variable.

        Empty values are treated as unset.
        """
        value = os.getenv(key)
        if value is None or not value.strip():
            return default
        return value.strip()

    def _get_int_env(self, key: str, default: int) -> int:
        """
        Get an integer environment variable.

        Raises:
            ConfigurationError: If the value is not an integer
        """
        raw = self._get_optional_env(key)
        if raw is None:
            return default
        try:
            return int(raw)
        except ValueError:
            raise ConfigurationError(
                f"Environment variable {key} must be an integer, got {raw!r}"
            ) from None

    def get_config(self) -> RelayConfig:
        """
        Get the relay configuration.

        Returns:
            RelayConfig: Relay configuration

        Raises:
            ConfigurationError: If a value is malformed or out of range
        """
        try:
            config = RelayConfig(
                host=self._get_optional_env("HOST", DEFAULT_HOST),
                port=self._get_int_env("PORT", DEFAULT_PORT),
                log_level=self._get_optional_env("LOG_LEVEL"),
                log_file=self._get_optional_env("LOG_FILE"),
                ping_interval=self._get_int_env(
                    "PING_INTERVAL", DEFAULT_PING_INTERVAL
                ),
                max_message_size=self._get_int_env(
                    "MAX_MESSAGE_SIZE", DEFAULT_MAX_MESSAGE_SIZE
                ),
                max_connections=self._get_int_env(
                    "MAX_CONNECTIONS", DEFAULT_MAX_CONNECTIONS
                ),
            )
        except ConfigurationError as e:
            logger.error(f"Failed to load configuration: {e}")
            raise

        logger.info("Configuration loaded successfully")
        return config
