"""
Key Corpus Module

Generates deterministic key sets for parity runs and reads them back.

Generated keys look like `user:17:9f86d081884c7d65`. With hash tags enabled
every 25th key embeds a Redis-style tag instead of its index, e.g.
`user:{tag25}:0b1e3f5a7c9d2e4f`, to show that tags are hashed literally.

Keys document layout:

    {
      "meta": {"generated_at": ..., "seed": ..., "count": ...,
               "prefix": ..., "hashtags": ...},
      "keys": [...]
    }
"""

import logging
import random
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Union

from ..config.settings import settings
from .artifacts import read_json

logger = logging.getLogger(__name__)


def generate_keys(
        count: int = None,
        seed: int = None,
        prefix: str = None,
        hashtags: bool = True,
) -> List[str]:
    """
    Generate a deterministic list of keys.

    Args:
        count: Number of keys (default from settings)
        seed: Random seed; the same seed always yields the same keys
        prefix: String prepended to every key
        hashtags: Inject a {tag} into every 25th key

    Returns:
        The generated keys
    """
    count = count if count is not None else settings.KEY_COUNT
    seed = seed if seed is not None else settings.SEED
    prefix = prefix if prefix is not None else settings.KEY_PREFIX

    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")

    rng = random.Random(seed)
    keys = []
    for i in range(count):
        token = rng.randbytes(8).hex()
        if hashtags and i % settings.HASHTAG_EVERY == 0:
            keys.append(f"{prefix}:{{tag{i}}}:{token}")
        else:
            keys.append(f"{prefix}:{i}:{token}")
    return keys


def build_keys_document(
        count: int = None,
        seed: int = None,
        prefix: str = None,
        hashtags: bool = True,
) -> Dict[str, Any]:
    """Generate keys and wrap them with their generation metadata."""
    count = count if count is not None else settings.KEY_COUNT
    seed = seed if seed is not None else settings.SEED
    prefix = prefix if prefix is not None else settings.KEY_PREFIX

    keys = generate_keys(count=count, seed=seed, prefix=prefix, hashtags=hashtags)
    logger.debug(f"Generated {len(keys)} keys (seed={seed}, prefix={prefix!r})")

    return {
        "meta": {
            "generated_at": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "seed": seed,
            "count": count,
            "prefix": prefix,
            "hashtags": hashtags,
        },
        "keys": keys,
    }


def load_keys(path: Union[str, Path]) -> List[str]:
    """
    Read the keys out of a keys document.

    Raises:
        ValueError: If the document has no "keys" list
    """
    payload = read_json(path)
    keys = payload.get("keys") if isinstance(payload, dict) else None
    if not isinstance(keys, list):
        raise ValueError(f"{path}: expected a JSON object with a 'keys' list")
    return [str(key) for key in keys]
