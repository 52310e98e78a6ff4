#!/usr/bin/env python3
"""
Shard-Ring Command Line Entry Point

Drives a parity experiment: generate a key corpus, resolve it through the
ring, and compare the result with another implementation's assignments.

Usage:
    shard-ring generate-keys --count 10000 --output artifacts/keys.json
    shard-ring assign --keys artifacts/keys.json --output artifacts/python_assignments.json
    shard-ring compare --baseline artifacts/ruby_assignments.json \\
                       --candidate artifacts/python_assignments.json
    shard-ring resolve user:42 "user:{tag0}:abc"
    shard-ring experiment --baseline artifacts/ruby_assignments.json

Environment Variables:
    SHARD_RING_SHARDS        - Shard list (name=host:port,...)
    SHARD_RING_REPLICAS      - Virtual points per shard
    SHARD_RING_ARTIFACT_DIR  - Default artifact directory
    SHARD_RING_DEBUG         - Enable debug mode (true/false)
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .cluster.config import ClusterConfig
from .config.settings import settings
from .corpus.artifacts import (
    build_assignments_document,
    compare_assignments,
    read_json,
    write_json,
)
from .corpus.keys import build_keys_document, load_keys
from .ring.errors import ConfigurationError, RingError

logger = logging.getLogger(__name__)


def _artifact(name: str) -> str:
    return str(Path(settings.ARTIFACT_DIR) / name)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="shard-ring",
        description="Shard-Ring: deterministic consistent-hash shard routing",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )

    ring_options = argparse.ArgumentParser(add_help=False)
    ring_options.add_argument(
        "--shards",
        type=str,
        default=settings.SHARDS,
        help="Comma separated name=host:port shard list",
    )
    ring_options.add_argument(
        "--replicas",
        type=int,
        default=settings.REPLICAS,
        help="Virtual points per shard",
    )

    corpus_options = argparse.ArgumentParser(add_help=False)
    corpus_options.add_argument(
        "--count",
        type=int,
        default=settings.KEY_COUNT,
        help="Number of keys to generate",
    )
    corpus_options.add_argument(
        "--seed",
        type=int,
        default=settings.SEED,
        help="Seed for deterministic generation",
    )
    corpus_options.add_argument(
        "--prefix",
        type=str,
        default=settings.KEY_PREFIX,
        help="String prepended to each key",
    )
    corpus_options.add_argument(
        "--no-hashtags",
        dest="hashtags",
        action="store_false",
        help="Disable hash tag injection",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    generate = commands.add_parser(
        "generate-keys",
        parents=[corpus_options],
        help="Write a deterministic key corpus",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    generate.add_argument("--output", default=_artifact("keys.json"), help="Keys file to write")

    assign = commands.add_parser(
        "assign",
        parents=[ring_options],
        help="Resolve a key corpus and write the assignments",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    assign.add_argument("--keys", default=_artifact("keys.json"), help="Keys file to read")
    assign.add_argument(
        "--output",
        default=_artifact("python_assignments.json"),
        help="Assignments file to write",
    )

    resolve = commands.add_parser(
        "resolve",
        parents=[ring_options],
        help="Print the shard for each key",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    resolve.add_argument("keys", nargs="+", help="Keys to resolve")

    compare = commands.add_parser(
        "compare",
        help="Compare two assignments files",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    compare.add_argument("--baseline", required=True, help="Reference assignments")
    compare.add_argument("--candidate", required=True, help="Assignments to evaluate")
    compare.add_argument("--output", default=_artifact("comparison.json"), help="Report file to write")
    compare.add_argument(
        "--limit",
        type=int,
        default=settings.MISMATCH_LIMIT,
        help="Maximum number of mismatch samples to include",
    )

    experiment = commands.add_parser(
        "experiment",
        parents=[ring_options, corpus_options],
        help="Generate keys, assign them and optionally compare with a baseline",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    experiment.add_argument(
        "--artifact-dir",
        default=settings.ARTIFACT_DIR,
        help="Directory for all experiment artifacts",
    )
    experiment.add_argument("--baseline", default=None, help="Reference assignments to compare against")
    experiment.add_argument(
        "--limit",
        type=int,
        default=settings.MISMATCH_LIMIT,
        help="Maximum number of mismatch samples to include",
    )

    return parser.parse_args(argv)


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging based on debug flag.

    Raises:
        ConfigurationError: If settings.LOG_LEVEL is not a known level name
    """
    level = logging.DEBUG if debug else logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        raise ConfigurationError(f"Unknown log level: {settings.LOG_LEVEL!r}")

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )


def cmd_generate_keys(args: argparse.Namespace) -> int:
    payload = build_keys_document(
        count=args.count,
        seed=args.seed,
        prefix=args.prefix,
        hashtags=args.hashtags,
    )
    write_json(args.output, payload)
    logger.info(f"Wrote {len(payload['keys'])} keys to {args.output}")
    return 0


def cmd_assign(args: argparse.Namespace) -> int:
    config = ClusterConfig.from_settings(shards=args.shards, replicas=args.replicas)
    keys = load_keys(args.keys)

    with config.build_router() as router:
        document = build_assignments_document(router, config.addresses, keys, key_source=args.keys)

    write_json(args.output, document)
    logger.info(f"Wrote {len(keys)} assignments to {args.output}")
    return 0


def cmd_resolve(args: argparse.Namespace) -> int:
    config = ClusterConfig.from_settings(shards=args.shards, replicas=args.replicas)

    with config.build_router() as router:
        for key in args.keys:
            shard = router.resolve_name(key)
            print(f"{key}\t{shard if shard is not None else '-'}")
    return 0


def _report(baseline_path: str, candidate_path: str, output: str, limit: int) -> int:
    report = compare_assignments(read_json(baseline_path), read_json(candidate_path), limit=limit)
    write_json(output, report.to_dict())

    logger.info(
        f"{report.matches}/{report.total_keys} keys match "
        f"(match rate {report.match_rate:.6f}), report written to {output}"
    )
    for example in report.mismatch_examples:
        logger.info(
            f"  {example['key']}: baseline={example['baseline_shard']} "
            f"candidate={example['candidate_shard']}"
        )
    return 0 if report.is_parity else 1


def cmd_compare(args: argparse.Namespace) -> int:
    return _report(args.baseline, args.candidate, args.output, args.limit)


def cmd_experiment(args: argparse.Namespace) -> int:
    artifact_dir = Path(args.artifact_dir)
    keys_path = str(artifact_dir / "keys.json")
    assignments_path = str(artifact_dir / "python_assignments.json")

    logger.info("==> Generating deterministic key set")
    payload = build_keys_document(
        count=args.count,
        seed=args.seed,
        prefix=args.prefix,
        hashtags=args.hashtags,
    )
    write_json(keys_path, payload)

    logger.info("==> Capturing ring assignments")
    config = ClusterConfig.from_settings(shards=args.shards, replicas=args.replicas)
    with config.build_router() as router:
        document = build_assignments_document(router, config.addresses, payload["keys"], key_source=keys_path)
    write_json(assignments_path, document)

    if not args.baseline:
        logger.info(f"Artifacts written to {artifact_dir}")
        return 0

    logger.info("==> Comparing baseline vs ring assignments")
    return _report(args.baseline, assignments_path, str(artifact_dir / "comparison.json"), args.limit)


COMMANDS = {
    "generate-keys": cmd_generate_keys,
    "assign": cmd_assign,
    "resolve": cmd_resolve,
    "compare": cmd_compare,
    "experiment": cmd_experiment,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the command line."""
    args = parse_args(argv)

    try:
        setup_logging(debug=args.debug)
        return COMMANDS[args.command](args)
    except (RingError, ValueError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
