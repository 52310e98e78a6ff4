"""
Tests for cluster configuration

These tests verify:
- parse_shards(): the name=host:port list format
- ShardConfig.address
- ClusterConfig lookups and router construction

Run with: python -m pytest tests/test_cluster_config.py -v
"""

import logging

import pytest

from shard_ring.cluster.config import ClusterConfig, ShardConfig, parse_shards
from shard_ring.config.settings import Settings
from shard_ring.ring.errors import ConfigurationError


class TestParseShards:
    """Test parse_shards()."""

    def test_parse_full_list(self, shards):
        """Test the default three-shard list."""
        assert [shard.name for shard in shards] == ["cache-a", "cache-b", "cache-c"]
        assert shards[0].addr == "127.0.0.1:6381"
        assert shards[2].address == ("127.0.0.1", 6383)

    def test_bare_names(self):
        """Test shards without an address."""
        shards = parse_shards("cache-a,cache-b")
        assert shards == [ShardConfig("cache-a"), ShardConfig("cache-b")]
        assert shards[0].address is None

    def test_whitespace_and_empty_entries(self):
        """Test surrounding whitespace and stray commas are ignored."""
        shards = parse_shards(" cache-a = 10.0.0.1:6379 , ,cache-b=10.0.0.2:6379,")
        assert [str(shard) for shard in shards] == [
            "cache-a=10.0.0.1:6379",
            "cache-b=10.0.0.2:6379",
        ]

    def test_empty_string(self):
        """Test an empty list is valid."""
        assert parse_shards("") == []

    def test_order_preserved(self):
        """Test shards keep their listed order."""
        assert [s.name for s in parse_shards("c,a,b")] == ["c", "a", "b"]

    def test_duplicates_kept_with_warning(self, caplog):
        """Test duplicate names are kept and reported."""
        with caplog.at_level(logging.WARNING, logger="shard_ring.cluster.config"):
            shards = parse_shards("a=h:1,a=h:2")
        assert len(shards) == 2
        assert "more than once" in caplog.text

    @pytest.mark.parametrize("value", [
        "=127.0.0.1:6381",
        "cache-a=127.0.0.1:port",
        "cache-a=6381",
        "cache-a=:6381",
    ])
    def test_invalid_entries(self, value):
        """Test malformed entries raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            parse_shards(value)

    def test_ipv6_style_host(self):
        """Test the port is taken after the last colon."""
        assert ShardConfig("a", "::1:6379").address == ("::1", 6379)


class TestClusterConfig:
    """Test ClusterConfig."""

    def test_from_settings_defaults(self):
        """Test the default settings describe cache-a/b/c with 160 replicas."""
        defaults = Settings()
        config = ClusterConfig.from_settings(shards=defaults.SHARDS, replicas=defaults.REPLICAS)
        assert config.shard_names == ["cache-a", "cache-b", "cache-c"]
        assert config.replicas == 160

    def test_get_shard_address(self, shards):
        """Test addresses are returned as (host, port)."""
        config = ClusterConfig(shards=shards, replicas=160)
        assert config.get_shard_address("cache-b") == ("127.0.0.1", 6382)

    def test_unknown_shard(self, shards):
        """Test unknown names raise ConfigurationError."""
        config = ClusterConfig(shards=shards)
        with pytest.raises(ConfigurationError):
            config.get_shard_address("cache-z")

    def test_shard_without_address(self):
        """Test asking for a missing address raises ConfigurationError."""
        config = ClusterConfig(shards=parse_shards("cache-a"))
        with pytest.raises(ConfigurationError):
            config.get_shard_address("cache-a")

    def test_addresses(self, shards):
        """Test the name -> address mapping used in artifact metadata."""
        config = ClusterConfig(shards=shards)
        assert config.addresses == {
            "cache-a": "127.0.0.1:6381",
            "cache-b": "127.0.0.1:6382",
            "cache-c": "127.0.0.1:6383",
        }

    def test_build_router_default_payloads(self, shards):
        """Test routers get (host, port) payloads by default."""
        router = ClusterConfig(shards=shards, replicas=160).build_router()
        assert len(router) == 480
        assert [node.payload for node in router.nodes] == [
            ("127.0.0.1", 6381),
            ("127.0.0.1", 6382),
            ("127.0.0.1", 6383),
        ]

    def test_build_router_custom_factory(self, shards):
        """Test a client factory is called once per shard."""
        calls = []

        def factory(shard):
            calls.append(shard.name)
            return f"client-{shard.name}"

        router = ClusterConfig(shards=shards, replicas=2).build_router(factory)
        assert calls == ["cache-a", "cache-b", "cache-c"]
        assert router.resolve("user:42:abcdef1234567890").payload == "client-cache-c"

    def test_invalid_replicas(self, shards):
        """Test a bad replica count surfaces when the router is built."""
        with pytest.raises(ConfigurationError):
            ClusterConfig(shards=shards, replicas=0).build_router()
