"""
Cluster Configuration Module

Describes the shards a router is built from. Shards are written as a comma
separated list of `name=host:port` entries:

    cache-a=127.0.0.1:6381,cache-b=127.0.0.1:6382,cache-c=127.0.0.1:6383

A bare `name` (no address) is accepted for rings that only route names.

Order matters: it is the order in which virtual points are inserted, which
decides who owns a colliding point. Duplicate names are kept (with a warning)
because the router does not deduplicate either.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..config.settings import settings
from ..ring.errors import ConfigurationError
from ..ring.router import Node, RingRouter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShardConfig:
    """
    A single shard definition.

    Attributes:
        name: Ring identity of the shard
        addr: "host:port" of the backend, empty when unknown
    """
    name: str
    addr: str = ""

    @property
    def address(self) -> Optional[Tuple[str, int]]:
        """The address as (host, port), or None when no address is set."""
        if not self.addr:
            return None
        host, sep, port = self.addr.rpartition(":")
        if not sep or not host:
            raise ConfigurationError(f"Invalid address for shard {self.name}: {self.addr!r}")
        try:
            return host, int(port)
        except ValueError:
            raise ConfigurationError(
                f"Invalid port for shard {self.name}: {port!r}"
            ) from None

    def __str__(self) -> str:
        return f"{self.name}={self.addr}" if self.addr else self.name


def parse_shards(value: str) -> List[ShardConfig]:
    """
    Parse a shard list.

    Args:
        value: Comma separated `name=host:port` or `name` entries

    Returns:
        ShardConfig objects in the given order

    Raises:
        ConfigurationError: If an entry has an empty name or a bad address
    """
    shards: List[ShardConfig] = []
    seen = set()

    for entry in value.split(","):
        entry = entry.strip()
        if not entry:
            continue

        name, _, addr = entry.partition("=")
        name, addr = name.strip(), addr.strip()
        if not name:
            raise ConfigurationError(f"Shard entry without a name: {entry!r}")

        shard = ShardConfig(name=name, addr=addr)
        shard.address  # raises ConfigurationError when malformed

        if name in seen:
            logger.warning(f"Shard {name} is listed more than once; its points will be added again")
        seen.add(name)
        shards.append(shard)

    return shards


def address_payload(shard: ShardConfig) -> Optional[Tuple[str, int]]:
    """Default payload factory: the shard's (host, port) address."""
    return shard.address


@dataclass
class ClusterConfig:
    """
    Shards plus the ring layout they are placed with.

    Attributes:
        shards: Ordered shard definitions
        replicas: Virtual points per shard
    """
    shards: List[ShardConfig] = field(default_factory=list)
    replicas: int = settings.REPLICAS

    @classmethod
    def from_settings(cls, shards: Optional[str] = None, replicas: Optional[int] = None) -> "ClusterConfig":
        """
        Build a cluster config from settings, with optional overrides.

        Args:
            shards: Shard list string (default settings.SHARDS)
            replicas: Virtual points per shard (default settings.REPLICAS)
        """
        return cls(
            shards=parse_shards(shards if shards is not None else settings.SHARDS),
            replicas=replicas if replicas is not None else settings.REPLICAS,
        )

    @property
    def shard_names(self) -> List[str]:
        return [shard.name for shard in self.shards]

    @property
    def addresses(self) -> Dict[str, str]:
        """Shard name -> "host:port" (last definition wins for repeated names)."""
        return {shard.name: shard.addr for shard in self.shards}

    def get_shard(self, name: str) -> ShardConfig:
        """
        Look up a shard by name.

        Raises:
            ConfigurationError: If no shard has that name
        """
        for shard in self.shards:
            if shard.name == name:
                return shard
        raise ConfigurationError(f"Unknown shard: {name}")

    def get_shard_address(self, name: str) -> Tuple[str, int]:
        """
        Get the address (host, port) for a shard.

        Raises:
            ConfigurationError: If the shard is unknown or has no address
        """
        address = self.get_shard(name).address
        if address is None:
            raise ConfigurationError(f"Shard {name} has no address")
        return address

    def build_router(self, client_factory=address_payload) -> RingRouter:
        """
        Build a router over the configured shards.

        Args:
            client_factory: Called once per shard to produce the node payload

        Returns:
            A new RingRouter
        """
        nodes = [Node(shard.name, client_factory(shard)) for shard in self.shards]
        return RingRouter(nodes, replicas=self.replicas)

    def __repr__(self) -> str:
        return f"ClusterConfig(shards={self.shard_names}, replicas={self.replicas})"
