"""
Configuration management for the signaling relay.

This package provides:
- The RelayConfig data structure with defaults and range validation
- Environment variable and .env loading
"""

from .settings import RelayConfig, RelayConfigManager

__all__ = [
    "RelayConfig",
    "RelayConfigManager",
]
