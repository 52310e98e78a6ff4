"""
Shard Client Selector Module

Maps keys to backend handles. The selector owns the current RingRouter and a
client factory; it resolves the shard through the ring and hands back the
payload the factory produced for that shard. It never opens connections on
its own: whatever the factory returns is what callers get.

Membership changes are handled by rebuilding. The new router is constructed
completely before it replaces the old one in a single attribute assignment,
so a concurrent lookup sees either the old ring or the new ring, never a
partial one.
"""

import logging
import threading
from typing import Any, Callable, Optional, Sequence

from ..config.settings import settings
from ..ring.errors import EmptyRingError
from ..ring.hashing import Key
from ..ring.router import Node, RingRouter
from .config import ClusterConfig, ShardConfig, address_payload

logger = logging.getLogger(__name__)

ClientFactory = Callable[[ShardConfig], Any]


class ShardClientSelector:
    """
    Resolves keys to shard payloads.

    Usage:
        selector = ShardClientSelector(parse_shards(settings.SHARDS))
        host, port = selector.client_for("user:42")

    Attributes:
        replicas: Virtual points per shard used for every (re)build
        client_factory: Produces the payload for a shard
    """

    def __init__(
            self,
            shards: Sequence[ShardConfig] = (),
            replicas: int = None,
            client_factory: ClientFactory = address_payload,
    ):
        """
        Initialize the selector and build the first ring.

        Args:
            shards: Ordered shard definitions
            replicas: Virtual points per shard (default from settings)
            client_factory: Called once per shard on every build
        """
        self.replicas = replicas if replicas is not None else settings.REPLICAS
        self.client_factory = client_factory
        self._rebuild_lock = threading.Lock()
        self._router = self._build(shards)

    @classmethod
    def from_config(cls, config: ClusterConfig, client_factory: ClientFactory = address_payload) -> "ShardClientSelector":
        return cls(config.shards, replicas=config.replicas, client_factory=client_factory)

    def _build(self, shards: Sequence[ShardConfig]) -> RingRouter:
        config = ClusterConfig(shards=list(shards), replicas=self.replicas)
        return config.build_router(self.client_factory)

    @property
    def router(self) -> RingRouter:
        """The router currently in use."""
        return self._router

    def node_for(self, key: Key) -> Optional[Node]:
        return self._router.resolve(key)

    def shard_for(self, key: Key) -> Optional[str]:
        """Name of the shard owning a key, or None when there are no shards."""
        return self._router.resolve_name(key)

    def client_for(self, key: Key) -> Any:
        """
        Payload of the shard owning a key.

        Raises:
            EmptyRingError: If no shard is configured
        """
        router = self._router
        node = router.resolve(key)
        if node is None:
            raise EmptyRingError(key)
        return node.payload

    def rebuild(self, shards: Sequence[ShardConfig]) -> RingRouter:
        """
        Replace the ring with one built from a new shard list.

        The previous router is returned, not closed: in-flight callers may
        still hold payloads from it. Close it once they are done.

        Args:
            shards: The new ordered shard definitions

        Returns:
            The router that was replaced
        """
        with self._rebuild_lock:
            router = self._build(shards)
            previous, self._router = self._router, router

        logger.info(
            f"Rebuilt ring: {len(previous.nodes)} -> {len(router.nodes)} shard(s), "
            f"{len(router)} points"
        )
        return previous

    def close(self) -> None:
        """Close the current router and the payloads it holds."""
        self._router.close()

    def __enter__(self) -> "ShardClientSelector":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"ShardClientSelector({self._router!r})"
