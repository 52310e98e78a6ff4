#!/usr/bin/env python3
"""
Benchmark Script for Shard-Ring

Measures ring construction and lookup throughput. No network is involved:
the router never touches one.

Usage:
    python scripts/benchmark.py                    # Run all benchmarks
    python scripts/benchmark.py --operations 50000 # Custom operation count
    python scripts/benchmark.py --nodes 16         # Larger cluster
    python scripts/benchmark.py --profile          # Enable cProfile
"""

import argparse
import time
import random
import string
import statistics
from collections import Counter
from typing import List, Callable, Dict, Any
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from shard_ring.cluster.replicas import ReplicaAwareSelector
from shard_ring.corpus.keys import generate_keys
from shard_ring.ring.hashing import key_hash
from shard_ring.ring.router import RingRouter


def random_string(length: int) -> str:
    """Generate a random alphanumeric string."""
    return ''.join(random.choices(string.ascii_letters + string.digits, k=length))


def measure_time(func: Callable, iterations: int = 1) -> Dict[str, float]:
    """Measure execution time statistics."""
    times = []

    for _ in range(iterations):
        start = time.perf_counter()
        func()
        elapsed = (time.perf_counter() - start) * 1000  # Convert to ms
        times.append(elapsed)

    return {
        "min_ms": min(times),
        "max_ms": max(times),
        "mean_ms": statistics.mean(times),
        "median_ms": statistics.median(times),
        "total_ms": sum(times),
    }


class Benchmark:
    """Collection of benchmarks for the ring router."""

    def __init__(self, operations: int = 10000, nodes: int = 3, replicas: int = 160, key_size: int = 24):
        self.operations = operations
        self.replicas = replicas
        self.names = [f"cache-{i}" for i in range(nodes)]
        self.router = RingRouter.build(self.names, replicas=replicas)

        # Pre-generate test data
        self.keys = [random_string(key_size) for _ in range(operations)]
        self.corpus = generate_keys(count=operations)

    def _result(self, stats: Dict[str, float], operation: str, count: int) -> Dict[str, Any]:
        stats["ops_per_second"] = count / (stats["total_ms"] / 1000)
        stats["operation"] = operation
        stats["count"] = count
        return stats

    def benchmark_build(self) -> Dict[str, Any]:
        """Benchmark ring construction."""
        builds = 20

        def run():
            for _ in range(builds):
                RingRouter.build(self.names, replicas=self.replicas)

        return self._result(measure_time(run), f"Build ({len(self.names)}x{self.replicas})", builds)

    def benchmark_key_hash(self) -> Dict[str, Any]:
        """Benchmark CRC-32 key hashing alone."""
        def run():
            for key in self.keys:
                key_hash(key)

        return self._result(measure_time(run), "Key hash", self.operations)

    def benchmark_resolve(self) -> Dict[str, Any]:
        """Benchmark resolve() on random keys."""
        router = self.router

        def run():
            for key in self.keys:
                router.resolve(key)

        return self._result(measure_time(run), "Resolve (random keys)", self.operations)

    def benchmark_resolve_corpus(self) -> Dict[str, Any]:
        """Benchmark resolve() on the generated parity corpus."""
        router = self.router

        def run():
            for key in self.corpus:
                router.resolve_name(key)

        return self._result(measure_time(run), "Resolve (corpus)", self.operations)

    def benchmark_reader_selection(self) -> Dict[str, Any]:
        """Benchmark replica-aware read selection."""
        pools = {name: [f"{name}-r{i}" for i in range(3)] for name in self.names}
        selector = ReplicaAwareSelector(self.router, pools)

        def run():
            for key in self.keys:
                selector.reader_for(key)

        return self._result(measure_time(run), "Reader selection", self.operations)

    def run_all(self) -> List[Dict[str, Any]]:
        """Run all benchmarks."""
        benchmarks = [
            ("Build", self.benchmark_build),
            ("Key hash", self.benchmark_key_hash),
            ("Resolve", self.benchmark_resolve),
            ("Resolve corpus", self.benchmark_resolve_corpus),
            ("Reader selection", self.benchmark_reader_selection),
        ]

        results = []
        for name, func in benchmarks:
            print(f"Running: {name}...", end=" ", flush=True)
            result = func()
            print(f"{result['ops_per_second']:,.0f} ops/sec")
            results.append(result)

        return results

    def distribution(self) -> Counter:
        """Keys per node for the generated corpus."""
        return Counter(self.router.resolve_name(key) for key in self.corpus)


def print_results(results: List[Dict[str, Any]]):
    """Print benchmark results in a table."""
    print()
    print("=" * 70)
    print("                        BENCHMARK RESULTS")
    print("=" * 70)
    print(f"{'Operation':<30} {'Ops/sec':>12} {'Mean (ms)':>12} {'Total (ms)':>12}")
    print("-" * 70)

    for r in results:
        print(f"{r['operation']:<30} {r['ops_per_second']:>12,.0f} "
              f"{r['mean_ms']:>12.3f} {r['total_ms']:>12.1f}")

    print("=" * 70)


def print_distribution(distribution: Counter):
    """Print how the corpus spreads over the nodes."""
    total = sum(distribution.values())
    print()
    print(f"{'Node':<20} {'Keys':>10} {'Share':>10}")
    print("-" * 42)
    for name, count in sorted(distribution.items()):
        print(f"{name:<20} {count:>10,} {count / total:>10.1%}")


def main():
    parser = argparse.ArgumentParser(
        description="Benchmark shard-ring components",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--operations", "-n",
        type=int,
        default=10000,
        help="Number of lookups per benchmark"
    )
    parser.add_argument(
        "--nodes",
        type=int,
        default=3,
        help="Number of nodes on the ring"
    )
    parser.add_argument(
        "--replicas",
        type=int,
        default=160,
        help="Virtual points per node"
    )
    parser.add_argument(
        "--profile",
        action="store_true",
        help="Enable cProfile profiling"
    )

    args = parser.parse_args()

    print(f"Shard-Ring Benchmark")
    print(f"====================")
    print(f"Lookups per test: {args.operations:,}")
    print(f"Nodes: {args.nodes}")
    print(f"Replicas: {args.replicas}")
    print()

    benchmark = Benchmark(
        operations=args.operations,
        nodes=args.nodes,
        replicas=args.replicas,
    )

    if args.profile:
        import cProfile
        import pstats

        profiler = cProfile.Profile()
        profiler.enable()
        results = benchmark.run_all()
        profiler.disable()

        print_results(results)

        print()
        print("Profiling Results (top 20):")
        print("-" * 70)
        stats = pstats.Stats(profiler)
        stats.sort_stats('cumulative')
        stats.print_stats(20)
    else:
        results = benchmark.run_all()
        print_results(results)

    print_distribution(benchmark.distribution())


if __name__ == "__main__":
    main()
