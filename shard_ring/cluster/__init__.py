"""
Cluster module for shard-ring.

This module provides the pieces layered on top of the ring router:
- Shard definitions and cluster configuration
- Key -> shard payload selection with atomic ring rebuilds
- Replica-aware read/write selection
"""

from .config import ClusterConfig, ShardConfig, parse_shards
from .replicas import ReplicaAwareSelector
from .selector import ShardClientSelector

__all__ = [
    'ClusterConfig',
    'ReplicaAwareSelector',
    'ShardClientSelector',
    'ShardConfig',
    'parse_shards',
]
