"""
Shard-Ring Configuration Settings

Defaults for the command line tools and cluster configuration. Every value
can be overridden from the environment.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Runtime configuration settings."""

    # Ring settings
    REPLICAS: int = int(os.environ.get("SHARD_RING_REPLICAS", "160"))
    SHARDS: str = os.environ.get(
        "SHARD_RING_SHARDS",
        "cache-a=127.0.0.1:6381,cache-b=127.0.0.1:6382,cache-c=127.0.0.1:6383",
    )

    # Key corpus settings
    KEY_COUNT: int = int(os.environ.get("SHARD_RING_KEY_COUNT", "200"))
    SEED: int = int(os.environ.get("SHARD_RING_SEED", "1337"))
    KEY_PREFIX: str = os.environ.get("SHARD_RING_KEY_PREFIX", "user")
    HASHTAG_EVERY: int = 25  # Every Nth generated key carries a {tag}

    # Artifact settings
    ARTIFACT_DIR: str = os.environ.get("SHARD_RING_ARTIFACT_DIR", "artifacts")
    MISMATCH_LIMIT: int = int(os.environ.get("SHARD_RING_MISMATCH_LIMIT", "10"))

    # Logging settings
    DEBUG: bool = os.environ.get("SHARD_RING_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("SHARD_RING_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()
