"""
Ring Hash Functions

Two different hash functions place things on the 32-bit ring:

    server_hash  MD5 of "<node-name>:<index>", first 4 digest bytes big-endian
    key_hash     CRC-32 (IEEE) of the raw key bytes

They must stay exactly as they are. Any other router that shares a ring with
this one computes the same two values, and swapping either function for
something "equivalent" relocates keys.

Keys are hashed literally. Hash tags such as "{user1000}" are NOT extracted.
"""

import hashlib
import zlib
from typing import Union

Key = Union[str, bytes, bytearray, memoryview]

HASH_MASK = 0xFFFFFFFF


def key_bytes(key: Key) -> bytes:
    """
    Return the raw bytes that get hashed for a key.

    Args:
        key: A str (encoded as UTF-8) or any bytes-like object

    Returns:
        The key as bytes, unchanged otherwise
    """
    if isinstance(key, str):
        return key.encode("utf-8")
    if isinstance(key, (bytes, bytearray, memoryview)):
        return bytes(key)
    raise TypeError(f"key must be str or bytes-like, not {type(key).__name__}")


def virtual_key(name: str, index: int) -> str:
    """Name of the index-th virtual point of a node, e.g. 'cache-a:7'."""
    return f"{name}:{index}"


def server_hash(virtual: str) -> int:
    """
    Compute the ring position of a virtual point.

    Args:
        virtual: Virtual key, see virtual_key()

    Returns:
        Unsigned 32-bit integer taken from the first 4 bytes of the MD5
        digest, big-endian.
    """
    digest = hashlib.md5(virtual.encode("utf-8")).digest()
    return int.from_bytes(digest[:4], byteorder="big")


def key_hash(key: Key) -> int:
    """
    Compute the ring position of a key.

    Args:
        key: The key to hash (str or bytes-like)

    Returns:
        Unsigned CRC-32 of the key bytes
    """
    return zlib.crc32(key_bytes(key)) & HASH_MASK
