"""Configuration module for shard-ring."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
