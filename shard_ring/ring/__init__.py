"""Ring router module for shard-ring."""

from .errors import ConfigurationError, EmptyRingError, RingError
from .hashing import key_hash, server_hash, virtual_key
from .router import DEFAULT_REPLICAS, Node, RingRouter

__all__ = [
    "DEFAULT_REPLICAS",
    "ConfigurationError",
    "EmptyRingError",
    "Node",
    "RingError",
    "RingRouter",
    "key_hash",
    "server_hash",
    "virtual_key",
]
