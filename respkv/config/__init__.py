"""Configuration module for resp-kv."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
