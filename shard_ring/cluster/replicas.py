"""
Replica-Aware Routing

Read/write splitting on top of the ring. The shard is always resolved by the
ring first, exactly as for plain routing. Only then is a second, unrelated
choice made among the read replicas attached to that shard.

The second hash is SHA-1 of the key. It is computed from the key alone and
is never fed back into the ring, so adding or removing read replicas cannot
move a key to a different shard.
"""

import hashlib
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from ..ring.hashing import Key, key_bytes
from ..ring.router import RingRouter

logger = logging.getLogger(__name__)


class ReplicaAwareSelector:
    """
    Chooses a writer (the shard's own payload) or a reader for a key.

    Attributes:
        router: Ring used to resolve the shard
        pools: Shard name -> ordered read replica payloads
        include_primary: Whether the primary also serves reads
        is_available: Optional predicate filtering read candidates
    """

    def __init__(
            self,
            router: RingRouter,
            pools: Mapping[str, Sequence[Any]] = None,
            include_primary: bool = False,
            is_available: Optional[Callable[[Any], bool]] = None,
    ):
        self.router = router
        self.pools: Dict[str, List[Any]] = {
            name: list(replicas) for name, replicas in (pools or {}).items()
        }
        self.include_primary = include_primary
        self.is_available = is_available

    def writer_for(self, key: Key) -> Any:
        """
        Payload of the primary shard for a key.

        Raises:
            EmptyRingError: If the ring is empty
        """
        return self.router.require(key).payload

    def replicas_for(self, key: Key) -> List[Any]:
        """Read replicas attached to the key's shard (may be empty)."""
        return list(self.pools.get(self.router.require(key).name, ()))

    def reader_for(self, key: Key) -> Any:
        """
        Payload to read a key from.

        Falls back to the primary when the shard has no (available) replicas.

        Raises:
            EmptyRingError: If the ring is empty
        """
        node = self.router.require(key)

        candidates = list(self.pools.get(node.name, ()))
        if self.include_primary:
            candidates.insert(0, node.payload)
        if self.is_available is not None:
            candidates = [candidate for candidate in candidates if self.is_available(candidate)]

        if not candidates:
            logger.debug(f"No read replica for shard {node.name}, using primary")
            return node.payload

        digest = hashlib.sha1(key_bytes(key)).digest()
        index = int.from_bytes(digest[:8], byteorder="big") % len(candidates)
        return candidates[index]
