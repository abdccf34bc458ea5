"""
resp-kv Configuration Settings

All configuration constants for the server. Every value can be
overridden through an environment variable of the same name prefixed
with ``RESPKV_``.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Server configuration settings."""

    # Network settings
    HOST: str = os.environ.get("RESPKV_HOST", "0.0.0.0")
    PORT: int = int(os.environ.get("RESPKV_PORT", "6379"))

    # Connection settings
    READ_BUFFER_SIZE: int = int(os.environ.get("RESPKV_READ_BUFFER_SIZE", "65536"))
    CONNECTION_TIMEOUT: int = int(os.environ.get("RESPKV_CONNECTION_TIMEOUT", "0"))  # 0 disables

    # Logging settings
    DEBUG: bool = os.environ.get("RESPKV_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("RESPKV_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()
