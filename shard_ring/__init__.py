"""
Shard-Ring: Deterministic Consistent-Hash Shard Routing

Routes keys to named backends on an MD5-pointed, CRC-32-keyed hash ring,
producing the same decision as any other router using that layout.
"""

from .ring import ConfigurationError, EmptyRingError, Node, RingRouter

__version__ = "1.0.0"

__all__ = ["ConfigurationError", "EmptyRingError", "Node", "RingRouter"]
