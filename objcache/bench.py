#!/usr/bin/env python3
"""
objcache Benchmark

Measures the throughput of the object cache operations in-process.

Usage:
    objcache-bench                          # Run all benchmarks
    objcache-bench --operations 50000       # Custom operation count
    objcache-bench --value-size 4096        # Larger payloads
    objcache-bench --expiry 60 --debug      # Run with the janitor active
    python -m objcache.bench --profile      # Enable cProfile
"""

import argparse
import logging
import os
import statistics
import sys
import threading
import time
from typing import Any, Callable, Dict, List

from .cache.errors import KeyNotFoundError
from .cache.store import ObjectCache
from .config.settings import NO_EXPIRY, settings


def parse_args(argv: List[str] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Benchmark the objcache in-memory object cache",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--operations", "-n",
        type=int,
        default=10000,
        help="Number of operations per benchmark",
    )
    parser.add_argument(
        "--value-size",
        type=int,
        default=1024,
        help="Payload size in bytes",
    )
    parser.add_argument(
        "--max-size",
        type=int,
        default=settings.MAX_SIZE,
        help="Nominal cache budget in bytes (entry cap is 1/10th)",
    )
    parser.add_argument(
        "--expiry",
        type=float,
        default=NO_EXPIRY,
        help="Idle expiry in seconds (0 disables the janitor)",
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=4,
        help="Writer threads for the concurrent benchmark",
    )
    parser.add_argument(
        "--profile",
        action="store_true",
        help="Enable cProfile profiling",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )


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
    """Collection of benchmarks for the object cache."""

    def __init__(
            self,
            operations: int = 10000,
            value_size: int = 1024,
            max_size: int = None,
            expiry: float = NO_EXPIRY,
            threads: int = 4,
    ):
        self.operations = operations
        self.value_size = value_size
        self.max_size = max_size if max_size is not None else settings.MAX_SIZE
        self.expiry = expiry
        self.threads = max(1, threads)

        # Pre-generate test data
        self.keys = [f"object/{i:08d}" for i in range(operations)]
        self.payload = os.urandom(value_size)

    def _cache(self) -> ObjectCache:
        return ObjectCache(max_size=self.max_size, expiry=self.expiry)

    def _populate(self, cache: ObjectCache) -> None:
        for key in self.keys:
            with cache.create(key) as sink:
                sink.write(self.payload)

    def _result(self, operation: str, stats: Dict[str, Any]) -> Dict[str, Any]:
        stats["ops_per_second"] = self.operations / (stats["total_ms"] / 1000)
        stats["operation"] = operation
        stats["count"] = self.operations
        return stats

    def benchmark_create(self) -> Dict[str, Any]:
        """Benchmark create/write/finalize."""
        with self._cache() as cache:
            stats = measure_time(lambda: self._populate(cache))
        return self._result("CREATE", stats)

    def benchmark_open(self) -> Dict[str, Any]:
        """Benchmark open (cache hits)."""
        with self._cache() as cache:
            self._populate(cache)

            def run():
                for key in self.keys:
                    cache.open(key)

            stats = measure_time(run)
        return self._result("OPEN (hit)", stats)

    def benchmark_open_miss(self) -> Dict[str, Any]:
        """Benchmark open (cache misses)."""
        with self._cache() as cache:
            def run():
                for key in self.keys:
                    try:
                        cache.open(key)
                    except KeyNotFoundError:
                        pass

            stats = measure_time(run)
        return self._result("OPEN (miss)", stats)

    def benchmark_delete(self) -> Dict[str, Any]:
        """Benchmark delete."""
        with self._cache() as cache:
            self._populate(cache)

            def run():
                for key in self.keys:
                    cache.delete(key)

            stats = measure_time(run)
        return self._result("DELETE", stats)

    def benchmark_concurrent_create(self) -> Dict[str, Any]:
        """Benchmark create/finalize from several threads on distinct keys."""
        with self._cache() as cache:
            chunks = [self.keys[i::self.threads] for i in range(self.threads)]

            def worker(keys: List[str]) -> None:
                for key in keys:
                    with cache.create(key) as sink:
                        sink.write(self.payload)

            def run():
                workers = [threading.Thread(target=worker, args=(chunk,)) for chunk in chunks]
                for t in workers:
                    t.start()
                for t in workers:
                    t.join()

            stats = measure_time(run)
        return self._result(f"CREATE ({self.threads} threads)", stats)

    def run_all(self) -> List[Dict[str, Any]]:
        """Run all benchmarks."""
        benchmarks = [
            ("CREATE", self.benchmark_create),
            ("OPEN (hit)", self.benchmark_open),
            ("OPEN (miss)", self.benchmark_open_miss),
            ("DELETE", self.benchmark_delete),
            ("CREATE (concurrent)", self.benchmark_concurrent_create),
        ]

        results = []
        for name, func in benchmarks:
            print(f"Running: {name}...", end=" ", flush=True)
            result = func()
            print(f"{result['ops_per_second']:,.0f} ops/sec")
            results.append(result)

        return results


def print_results(results: List[Dict[str, Any]]) -> None:
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


def main(argv: List[str] = None) -> None:
    """Main entry point for the benchmark."""
    args = parse_args(argv)
    setup_logging(debug=args.debug)
    logger = logging.getLogger(__name__)

    logger.info("Starting objcache benchmark")
    logger.info(f"  Operations: {args.operations:,}")
    logger.info(f"  Value size: {args.value_size}")
    logger.info(f"  Max size: {args.max_size}")
    logger.info(f"  Expiry: {args.expiry}")

    entry_cap = args.max_size // settings.BUFFER_RATIO or args.max_size
    if args.value_size > entry_cap:
        logger.error(f"Value size {args.value_size} exceeds the per-entry cap of {entry_cap} bytes")
        sys.exit(2)

    benchmark = Benchmark(
        operations=args.operations,
        value_size=args.value_size,
        max_size=args.max_size,
        expiry=args.expiry,
        threads=args.threads,
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


if __name__ == "__main__":
    main()
