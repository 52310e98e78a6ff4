"""
Ring Router Module

Deterministic consistent-hash ring. Given an ordered list of named nodes it
places `replicas` virtual points per node on a 32-bit circle and routes each
key to the owner of the first point at or after the key's hash.

Routing decisions are meant to be identical to every other router built on
the same layout:

    point(node, i) = md5("<name>:<i>")[0:4] as big-endian uint32
    hash(key)      = crc32(key bytes)
    owner(key)     = table[first point >= hash(key)], wrapping to points[0]

The ring is built once in the constructor and never modified afterwards, so
any number of threads may call resolve() concurrently. To change membership,
build a new RingRouter and swap the reference (see cluster.selector).
"""

import bisect
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from .errors import ConfigurationError, EmptyRingError
from .hashing import Key, key_hash, server_hash, virtual_key

logger = logging.getLogger(__name__)

DEFAULT_REPLICAS = 160

NodeLike = Union["Node", Tuple[str, Any], str]


@dataclass(frozen=True)
class Node:
    """
    A named backend on the ring.

    Attributes:
        name: Identity used to place the node's virtual points
        payload: Whatever the caller associates with the node (connection
                 handle, address, ...). Not used for routing, equality or
                 hashing.
    """
    name: str
    payload: Any = field(default=None, compare=False)


def _as_node(item: NodeLike) -> Node:
    """Accept a Node, a (name, payload) pair or a bare name."""
    if isinstance(item, Node):
        return item
    if isinstance(item, str):
        return Node(item)
    try:
        name, payload = item
    except (TypeError, ValueError):
        raise ConfigurationError(
            f"node must be a Node, a name or a (name, payload) pair, got {item!r}"
        ) from None
    if not isinstance(name, str):
        raise ConfigurationError(f"node name must be a string, got {name!r}")
    return Node(name, payload)


class RingRouter:
    """
    Immutable consistent-hash ring.

    Lookup is O(log N) where N = replicas * number of nodes.

    Two properties are inherited verbatim from the reference layout and must
    not be "fixed":

    - Nodes are not deduplicated by name. A repeated name adds its points a
      second time.
    - When two virtual points land on the same value, the point list keeps
      both entries but the lookup table keeps only the node inserted last.

    Usage:
        router = RingRouter.build(["cache-a", "cache-b", "cache-c"])
        node = router.resolve("user:42")   # Node or None

    Attributes:
        replicas: Virtual points per node
    """

    def __init__(self, nodes: Iterable[NodeLike] = (), replicas: int = DEFAULT_REPLICAS):
        """
        Build the ring.

        Args:
            nodes: Ordered nodes. Insertion order decides collision winners.
            replicas: Virtual points per node, must be >= 1

        Raises:
            ConfigurationError: If replicas is not a positive integer or a
                node cannot be interpreted.
        """
        if isinstance(replicas, bool) or not isinstance(replicas, int) or replicas < 1:
            raise ConfigurationError(f"replicas must be a positive integer, got {replicas!r}")

        self.replicas = replicas
        self._nodes: Tuple[Node, ...] = tuple(_as_node(item) for item in nodes)

        table: Dict[int, Node] = {}
        points: List[int] = []
        collisions = 0

        for node in self._nodes:
            for index in range(replicas):
                point = server_hash(virtual_key(node.name, index))
                if point in table:
                    collisions += 1
                table[point] = node
                points.append(point)

        points.sort()

        # Points and table are published together so a lookup always reads a
        # consistent pair, even while close() runs on another thread.
        self._ring: Tuple[Tuple[int, ...], Dict[int, Node]] = (tuple(points), table)
        self._closed = False

        if collisions:
            logger.warning(
                f"Ring has {collisions} colliding virtual point(s); "
                f"later nodes own the shared positions"
            )
        logger.debug(
            f"Built ring with {len(self._nodes)} node(s), "
            f"{replicas} replicas each, {len(points)} points"
        )

    @classmethod
    def build(cls, nodes: Iterable[NodeLike] = (), replicas: int = DEFAULT_REPLICAS) -> "RingRouter":
        """Construct a router. Same as calling the class directly."""
        return cls(nodes, replicas=replicas)

    @property
    def nodes(self) -> Tuple[Node, ...]:
        """Nodes in construction order (duplicates included)."""
        return self._nodes

    @property
    def points(self) -> Tuple[int, ...]:
        """All virtual points, ascending."""
        return self._ring[0]

    @property
    def is_empty(self) -> bool:
        return not self._ring[0]

    def __len__(self) -> int:
        return len(self._ring[0])

    def owner_of(self, point: int) -> Optional[Node]:
        """Return the node owning an exact point, or None if it is not on the ring."""
        return self._ring[1].get(point)

    @staticmethod
    def _lower_bound(points: Tuple[int, ...], hash_value: int) -> int:
        index = bisect.bisect_left(points, hash_value)
        if index == len(points):
            # Past the last point: the keyspace is circular
            index = 0
        return index

    def find_point_index(self, hash_value: int) -> int:
        """
        Index of the first point >= hash_value, wrapping to 0 past the end.

        Args:
            hash_value: Unsigned 32-bit key hash

        Returns:
            Index into `points`

        Raises:
            EmptyRingError: If the ring holds no points
        """
        points = self._ring[0]
        if not points:
            raise EmptyRingError()
        return self._lower_bound(points, hash_value)

    def resolve_hash(self, hash_value: int) -> Optional[Node]:
        """
        Resolve an already computed key hash.

        Returns:
            The owning node, or None for an empty ring
        """
        points, table = self._ring
        if not points:
            return None
        return table[points[self._lower_bound(points, hash_value)]]

    def resolve(self, key: Key) -> Optional[Node]:
        """
        Resolve the node for a key.

        Args:
            key: str (hashed as UTF-8) or bytes-like, hashed literally

        Returns:
            The owning node, or None when the ring is empty
        """
        return self.resolve_hash(key_hash(key))

    def resolve_name(self, key: Key) -> Optional[str]:
        """Name of the node for a key, or None when the ring is empty."""
        node = self.resolve(key)
        return node.name if node is not None else None

    def require(self, key: Key) -> Node:
        """
        Resolve the node for a key, treating an empty ring as an error.

        Raises:
            EmptyRingError: If the ring holds no points
        """
        node = self.resolve(key)
        if node is None:
            raise EmptyRingError(key)
        return node

    def close(self) -> None:
        """
        Close node payloads and release all references.

        Every payload with a callable close() is closed exactly once, even if
        an earlier one fails. The first failure is re-raised afterwards.
        After close() the router behaves like an empty ring; lookups racing
        with close() see either the full ring or the empty one.
        """
        if self._closed:
            return
        self._closed = True

        nodes = self._nodes
        self._ring = ((), {})
        self._nodes = ()

        first_error: Optional[BaseException] = None
        seen = set()
        for node in nodes:
            payload = node.payload
            close = getattr(payload, "close", None)
            if payload is None or id(payload) in seen or not callable(close):
                continue
            seen.add(id(payload))
            try:
                close()
            except Exception as e:
                logger.error(f"Failed to close payload of node {node.name}: {e}")
                if first_error is None:
                    first_error = e

        if first_error is not None:
            raise first_error

    def __enter__(self) -> "RingRouter":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        names = [node.name for node in self._nodes]
        return f"RingRouter(nodes={names}, replicas={self.replicas}, points={len(self._ring[0])})"
