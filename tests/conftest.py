"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import json
from pathlib import Path
from typing import Any, Dict, List

import pytest

from shard_ring.cluster.config import ShardConfig, parse_shards
from shard_ring.ring.router import RingRouter

FIXTURES_DIR = Path(__file__).parent / "fixtures"

SHARD_NAMES = ["cache-a", "cache-b", "cache-c"]
SHARD_LIST = "cache-a=127.0.0.1:6381,cache-b=127.0.0.1:6382,cache-c=127.0.0.1:6383"


# ============================================================================
# Router Fixtures
# ============================================================================

@pytest.fixture
def shard_names() -> List[str]:
    """The three-shard layout used throughout the parity experiment."""
    return list(SHARD_NAMES)


@pytest.fixture
def router(shard_names: List[str]) -> RingRouter:
    """Router over cache-a/b/c with the default 160 points per shard."""
    return RingRouter.build(shard_names, replicas=160)


@pytest.fixture
def small_router(shard_names: List[str]) -> RingRouter:
    """
    Router with a single point per shard.

    Points, ascending: 129872537 (cache-a), 540484991 (cache-c),
    1056567121 (cache-b).
    """
    return RingRouter.build(shard_names, replicas=1)


@pytest.fixture
def empty_router() -> RingRouter:
    """Router built from an empty node list."""
    return RingRouter.build([])


# ============================================================================
# Cluster Fixtures
# ============================================================================

@pytest.fixture
def shards() -> List[ShardConfig]:
    """Shard definitions with addresses."""
    return parse_shards(SHARD_LIST)


# ============================================================================
# Parity Fixtures
# ============================================================================

@pytest.fixture(scope="session")
def parity_document() -> Dict[str, Any]:
    """
    Assignments computed by an independent, non-Python implementation.

    Layout: cache-a, cache-b, cache-c with 160 points each. Every entry has
    the key, its CRC-32 and the shard it must resolve to.
    """
    with open(FIXTURES_DIR / "parity_assignments.json", encoding="utf-8") as f:
        return json.load(f)


class CloseRecorder:
    """Payload stand-in that counts close() calls."""

    def __init__(self, name: str, fail: bool = False):
        self.name = name
        self.fail = fail
        self.closed = 0

    def close(self) -> None:
        self.closed += 1
        if self.fail:
            raise RuntimeError(f"{self.name} refused to close")


@pytest.fixture
def close_recorder():
    """Factory fixture for payloads that record close() calls."""
    return CloseRecorder


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
