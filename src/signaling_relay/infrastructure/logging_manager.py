"""
Environment-aware logging management for the signaling relay.

This module provides centralized logging configuration with environment-based
log levels and YAML configuration support.

Environment Log Levels:
- Development: DEBUG and above
- Staging: INFO and above
- Production: WARNING and above
"""

import copy
import logging
import logging.config
import os
import sys
import yaml
from pathlib import Path
from typing import Optional, Dict, Any
from enum import Enum

NOISY_LOGGERS = (
    "websockets",
    "websockets.server",
    "websockets.protocol",
    "asyncio",
)


class Environment(Enum):
    """Environment enumeration."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LoggingManager:
    """Centralized logging management with production controls."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize logging manager.

        Args:
            config_path: Path to YAML configuration file. If None, uses the
                packaged ``logging.yaml``.
        """
        if config_path is None:
            config_path = Path(__file__).parent.parent / "logging.yaml"

        self.config_path = config_path
        self._config_cache: Optional[Dict[str, Any]] = None
        self._refresh_environment()

    def _refresh_environment(self) -> None:
        self._environment = self._detect_environment()
        self._production_mode = self._environment == Environment.PRODUCTION

    def _detect_environment(self) -> Environment:
        """Detect current environment from environment variables."""
        env = os.getenv("ENVIRONMENT", "development").lower()

        if env in ["prod", "production"]:
            return Environment.PRODUCTION
        elif env in ["staging", "stage"]:
            return Environment.STAGING
        else:
            return Environment.DEVELOPMENT

    def _load_yaml_config(self) -> Optional[Dict[str, Any]]:
        """Load YAML logging configuration."""
        if self._config_cache is not None:
            return self._config_cache

        if not self.config_path.exists():
            return None

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f)
            self._config_cache = config
            return config
        except (yaml.YAMLError, IOError) as e:
            print(f"Warning: Failed to load YAML logging config: {e}", file=sys.stderr)
            return None

    def _get_environment_log_level(self) -> str:
        """Get appropriate log level for current environment."""
        if self._production_mode:
            return "WARNING"
        elif self._environment == Environment.STAGING:
            return "INFO"
        else:
            return "DEBUG"

    def _apply_production_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply production-specific overrides to configuration."""
        if not self._production_mode:
            return config

        env_log_level = self._get_environment_log_level()

        if "root" in config:
            config["root"]["level"] = env_log_level

        if "loggers" in config:
            for logger_name, logger_config in config["loggers"].items():
                # Third-party loggers stay at their configured level
                if logger_name in NOISY_LOGGERS:
                    continue
                logger_config["level"] = env_log_level

        return config

    def setup_logging(
        self,
        component_name: str,
        log_level: Optional[str] = None,
        log_file: Optional[str] = None,
    ) -> logging.Logger:
        """
        Set up logging for a component with environment-aware configuration.

        ENVIRONMENT is read again on every call.

        Args:
            component_name: Name of the component
            log_level: Override log level (if None, uses environment-appropriate level:
                      Development=DEBUG, Staging=INFO, Production=WARNING)
            log_file: Extra log file to write to

        Returns:
            Configured logger instance
        """
        self._refresh_environment()
        production_mode = self._production_mode

        if log_level is None:
            log_level = self._get_environment_log_level()

        config = self._load_yaml_config()

        if config:
            # dictConfig mutates nested dicts, keep the cached copy pristine
            config = self._apply_production_overrides(copy.deepcopy(config))
            logging.config.dictConfig(config)

            logger = logging.getLogger(component_name)
            logger.setLevel(getattr(logging, log_level.upper()))

            if log_file:
                logger.addHandler(
                    self._create_file_handler(log_file, production_mode)
                )

            self._suppress_noisy_loggers()
            return logger
        else:
            return self._setup_basic_logging(
                component_name, log_level, log_file, production_mode
            )

    def _create_formatter(self, production_mode: bool) -> logging.Formatter:
        if production_mode:
            return logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        return logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def _create_file_handler(
        self, log_file: str, production_mode: bool
    ) -> logging.Handler:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.WARNING if production_mode else logging.DEBUG)
        file_handler.setFormatter(self._create_formatter(production_mode))
        return file_handler

    def _setup_basic_logging(
        self,
        component_name: str,
        log_level: str,
        log_file: Optional[str],
        production_mode: bool,
    ) -> logging.Logger:
        """Set up basic logging when YAML config is not available."""
        logger = logging.getLogger(component_name)
        logger.setLevel(getattr(logging, log_level.upper()))
        logger.handlers.clear()

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logger.level)
        console_handler.setFormatter(self._create_formatter(production_mode))
        logger.addHandler(console_handler)

        if log_file:
            logger.addHandler(self._create_file_handler(log_file, production_mode))

        self._suppress_noisy_loggers()

        return logger

    def _suppress_noisy_loggers(self):
        """Suppress noisy third-party library loggers."""
        for logger_name in NOISY_LOGGERS:
            logging.getLogger(logger_name).setLevel(logging.WARNING)

    def get_environment(self) -> Environment:
        """Get current environment."""
        return self._environment

    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self._production_mode

    def get_effective_log_level(self, component_name: str) -> str:
        """Get effective log level for a component."""
        logger = logging.getLogger(component_name)
        return logging.getLevelName(logger.getEffectiveLevel())


# Global logging manager instance
_logging_manager = LoggingManager()


def setup_logging(
    component_name: str,
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Set up logging for a component (convenience function).

    Args:
        component_name: Name of the component
        log_level: Override log level
        log_file: Extra log file path

    Returns:
        Configured logger instance
    """
    return _logging_manager.setup_logging(
        component_name, log_level, log_file
    )


def get_logger(component_name: str) -> logging.Logger:
    """Get a logger for a component."""
    return logging.getLogger(component_name)

