"""
Tests for the shard-ring command line

These tests drive main() end to end with temporary artifact directories.

Run with: python -m pytest tests/test_main.py -v
"""

import json

import pytest

from shard_ring.main import main, parse_args, settings, setup_logging

SHARDS = "cache-a=127.0.0.1:6381,cache-b=127.0.0.1:6382,cache-c=127.0.0.1:6383"


def _read(path):
    with open(path, encoding="utf-8") as f:
        return json.load(f)


class TestParseArgs:
    """Test argument parsing."""

    def test_command_required(self):
        """Test running without a subcommand is an error."""
        with pytest.raises(SystemExit):
            parse_args([])

    def test_defaults(self):
        """Test corpus defaults: 200 keys, seed 1337, prefix user, hash tags on."""
        args = parse_args(["generate-keys"])
        assert args.count == 200
        assert args.seed == 1337
        assert args.prefix == "user"
        assert args.hashtags is True

    def test_no_hashtags(self):
        """Test --no-hashtags flips the flag."""
        assert parse_args(["generate-keys", "--no-hashtags"]).hashtags is False


class TestCommands:
    """Test each subcommand."""

    def test_generate_keys(self, tmp_path):
        """Test generate-keys writes a keys document."""
        output = tmp_path / "keys.json"
        assert main(["generate-keys", "--count", "50", "--seed", "1", "--output", str(output)]) == 0

        document = _read(output)
        assert len(document["keys"]) == 50
        assert document["meta"]["seed"] == 1

    def test_assign(self, tmp_path):
        """Test assign resolves every key from the keys file."""
        keys = tmp_path / "keys.json"
        output = tmp_path / "out" / "assignments.json"
        keys.write_text(json.dumps({"keys": ["user:42:abcdef1234567890", "{user1000}.following"]}))

        assert main(["assign", "--keys", str(keys), "--output", str(output), "--shards", SHARDS]) == 0

        document = _read(output)
        assert document["assignments"] == [
            {"key": "user:42:abcdef1234567890", "shard": "cache-a"},
            {"key": "{user1000}.following", "shard": "cache-c"},
        ]
        assert document["meta"]["replicas"] == 160
        assert document["meta"]["key_source"] == str(keys)
        assert document["meta"]["shards"]["cache-b"] == "127.0.0.1:6382"

    def test_assign_matches_golden_file(self, tmp_path, parity_document):
        """Test assign followed by compare reports full parity with the fixture."""
        keys = tmp_path / "keys.json"
        candidate = tmp_path / "candidate.json"
        baseline = tmp_path / "baseline.json"
        report = tmp_path / "comparison.json"
        keys.write_text(json.dumps({"keys": [e["key"] for e in parity_document["assignments"]]}))
        baseline.write_text(json.dumps(parity_document))

        assert main(["assign", "--keys", str(keys), "--output", str(candidate), "--shards", SHARDS]) == 0
        assert main([
            "compare",
            "--baseline", str(baseline),
            "--candidate", str(candidate),
            "--output", str(report),
        ]) == 0

        comparison = _read(report)
        assert comparison["match_rate"] == 1.0
        assert comparison["mismatches"] == 0

    def test_resolve(self, capsys):
        """Test resolve prints one tab separated line per key."""
        assert main(["resolve", "--shards", SHARDS, "user:42:abcdef1234567890", "{user1000}.cart"]) == 0

        out = capsys.readouterr().out
        assert "user:42:abcdef1234567890\tcache-a" in out
        assert "{user1000}.cart\tcache-a" in out

    def test_resolve_without_shards(self, capsys):
        """Test an empty shard list prints a placeholder instead of failing."""
        assert main(["resolve", "--shards", "", "user:1"]) == 0
        assert "user:1\t-" in capsys.readouterr().out

    def test_invalid_replicas(self, capsys):
        """Test configuration errors exit with status 2."""
        assert main(["resolve", "--shards", SHARDS, "--replicas", "0", "user:1"]) == 2

    def test_invalid_log_level(self, monkeypatch):
        """Test an unknown SHARD_RING_LOG_LEVEL exits with status 2 instead of a traceback."""
        monkeypatch.setattr(settings, "LOG_LEVEL", "LOUD")
        assert main(["resolve", "--shards", SHARDS, "user:1"]) == 2

    def test_setup_logging_rejects_unknown_level(self, monkeypatch):
        """Test the level is validated before any handler is configured."""
        monkeypatch.setattr(settings, "LOG_LEVEL", "LOUD")
        with pytest.raises(ValueError, match="Unknown log level"):
            setup_logging()

    def test_missing_keys_file(self, tmp_path):
        """Test an unreadable keys file exits with status 2."""
        assert main(["assign", "--keys", str(tmp_path / "nope.json"), "--output", str(tmp_path / "o.json")]) == 2


class TestExperiment:
    """Test the experiment subcommand."""

    def test_without_baseline(self, tmp_path):
        """Test the experiment writes keys and assignments."""
        assert main(["experiment", "--artifact-dir", str(tmp_path), "--count", "100", "--shards", SHARDS]) == 0

        keys = _read(tmp_path / "keys.json")["keys"]
        assignments = _read(tmp_path / "python_assignments.json")["assignments"]
        assert [a["key"] for a in assignments] == keys
        assert {a["shard"] for a in assignments} <= {"cache-a", "cache-b", "cache-c"}

    def test_parity_with_baseline(self, tmp_path):
        """Test comparing against an identical baseline succeeds."""
        first = tmp_path / "first"
        second = tmp_path / "second"
        assert main(["experiment", "--artifact-dir", str(first), "--count", "300", "--shards", SHARDS]) == 0
        baseline = first / "python_assignments.json"

        assert main([
            "experiment",
            "--artifact-dir", str(second),
            "--count", "300",
            "--shards", SHARDS,
            "--baseline", str(baseline),
        ]) == 0
        assert _read(second / "comparison.json")["match_rate"] == 1.0

    def test_mismatch_fails(self, tmp_path):
        """Test any mismatch makes the experiment exit with status 1."""
        assert main(["experiment", "--artifact-dir", str(tmp_path), "--count", "40", "--shards", SHARDS]) == 0
        document = _read(tmp_path / "python_assignments.json")
        document["assignments"][0]["shard"] = "cache-z"
        baseline = tmp_path / "baseline.json"
        baseline.write_text(json.dumps(document))

        assert main([
            "experiment",
            "--artifact-dir", str(tmp_path),
            "--count", "40",
            "--shards", SHARDS,
            "--baseline", str(baseline),
        ]) == 1

        comparison = _read(tmp_path / "comparison.json")
        assert comparison["mismatches"] == 1
        assert comparison["mismatch_examples"][0]["baseline_shard"] == "cache-z"
