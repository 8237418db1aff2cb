#!/usr/bin/env python3
"""
Queue Performance Benchmark

Measures the cost of simulating a priority queue on an ordered key-value
store. It tests:

1. Codec Performance:
   - Packed list append vs full decode/re-encode
   - Tail removal at various tier sizes

2. Queue Operations Performance:
   - Insert latency at various queue sizes
   - Pop latency with many or few distinct priorities
   - size() cost versus number of distinct priorities

Usage:
    python queue_benchmark.py
    python queue_benchmark.py --quick       # Quick run
    python queue_benchmark.py --full        # Full benchmark suite
"""

import argparse
import gc
import os
import random
import statistics
import sys
import time
from dataclasses import dataclass
from typing import List, Callable, Any

# Add parent directory to path for local development
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from kvheap import PriorityQueue, InMemoryOrderedStore
from kvheap.codec import (
    encode_elements,
    decode_elements,
    append_element,
    remove_last,
)


# ============================================================================
# Helper Functions for Queue Testing
# ============================================================================

def create_benchmark_queue(queue_name: str = "bench_queue") -> PriorityQueue:
    """Create a PriorityQueue with InMemoryOrderedStore for benchmarking."""
    return PriorityQueue.from_store(InMemoryOrderedStore(), queue_name)


# ============================================================================
# Benchmark Utilities
# ============================================================================

@dataclass
class BenchmarkResult:
    """Result of a benchmark run."""
    name: str
    iterations: int
    total_time_s: float
    min_latency_us: float
    max_latency_us: float
    mean_latency_us: float
    median_latency_us: float
    p95_latency_us: float
    p99_latency_us: float
    throughput_ops: float

    def __str__(self) -> str:
        return (
            f"{self.name}:\n"
            f"  Iterations: {self.iterations:,}\n"
            f"  Total time: {self.total_time_s:.4f}s\n"
            f"  Latency (μs): min={self.min_latency_us:.1f}, "
            f"mean={self.mean_latency_us:.1f}, "
            f"median={self.median_latency_us:.1f}, "
            f"p95={self.p95_latency_us:.1f}, "
            f"p99={self.p99_latency_us:.1f}, "
            f"max={self.max_latency_us:.1f}\n"
            f"  Throughput: {self.throughput_ops:,.1f} ops/s"
        )


def percentile(data: List[float], p: float) -> float:
    """Calculate percentile of data."""
    if not data:
        return 0.0
    k = (len(data) - 1) * p / 100
    f = int(k)
    c = f + 1 if f < len(data) - 1 else f
    return data[f] + (k - f) * (data[c] - data[f])


def benchmark(name: str, iterations: int, func: Callable[[], Any]) -> BenchmarkResult:
    """Run a benchmark and collect statistics."""
    gc.collect()

    latencies = []
    start_total = time.perf_counter()

    for _ in range(iterations):
        start = time.perf_counter()
        func()
        end = time.perf_counter()
        latencies.append((end - start) * 1_000_000)  # Convert to microseconds

    total_time = time.perf_counter() - start_total

    latencies.sort()

    return BenchmarkResult(
        name=name,
        iterations=iterations,
        total_time_s=total_time,
        min_latency_us=min(latencies),
        max_latency_us=max(latencies),
        mean_latency_us=statistics.mean(latencies),
        median_latency_us=statistics.median(latencies),
        p95_latency_us=percentile(latencies, 95),
        p99_latency_us=percentile(latencies, 99),
        throughput_ops=iterations / total_time,
    )


# ============================================================================
# Codec Benchmarks
# ============================================================================

def bench_append(tier_size: int, iterations: int) -> BenchmarkResult:
    """Benchmark the decode-free append path."""
    data = encode_elements([b"payload-%d" % i for i in range(tier_size)])

    def append():
        return append_element(data, b"benchmark-element")

    return benchmark(f"Packed append (tier_size={tier_size:,})", iterations, append)


def bench_reencode(tier_size: int, iterations: int) -> BenchmarkResult:
    """Benchmark decode + re-encode (the path append avoids)."""
    data = encode_elements([b"payload-%d" % i for i in range(tier_size)])

    def reencode():
        return encode_elements(decode_elements(data) + [b"benchmark-element"])

    return benchmark(f"Decode+encode (tier_size={tier_size:,})", iterations, reencode)


def bench_remove_last(tier_size: int, iterations: int) -> BenchmarkResult:
    """Benchmark tail removal from a packed list."""
    data = encode_elements([b"payload-%d" % i for i in range(tier_size)])

    def remove():
        return remove_last(data)

    return benchmark(f"Remove last (tier_size={tier_size:,})", iterations, remove)


# ============================================================================
# Queue Benchmarks
# ============================================================================

def bench_insert(queue_size: int, priority_range: int, iterations: int) -> BenchmarkResult:
    """Benchmark insert operations."""
    queue = create_benchmark_queue("bench")

    for i in range(queue_size):
        queue.insert(b"task-%d" % i, random.randint(0, priority_range))

    def insert():
        queue.insert(b"benchmark-task-payload", random.randint(0, priority_range))

    return benchmark(
        f"Insert (queue_size={queue_size:,}, priorities={priority_range + 1:,})",
        iterations,
        insert,
    )


def bench_pop(queue_size: int, priority_range: int, iterations: int) -> BenchmarkResult:
    """Benchmark pop operations."""
    queue = create_benchmark_queue("bench")

    for i in range(queue_size + iterations):
        queue.insert(b"task-%d" % i, random.randint(0, priority_range))

    return benchmark(
        f"Pop (queue_size={queue_size:,}, priorities={priority_range + 1:,})",
        iterations,
        queue.pop,
    )


def bench_size(queue_size: int, priority_range: int, iterations: int) -> BenchmarkResult:
    """Benchmark size(), which reads one header per distinct priority."""
    queue = create_benchmark_queue("bench")

    for i in range(queue_size):
        queue.insert(b"task-%d" % i, random.randint(0, priority_range))

    return benchmark(
        f"Size (queue_size={queue_size:,}, priorities={priority_range + 1:,})",
        iterations,
        queue.size,
    )


# ============================================================================
# Correctness Verification
# ============================================================================

def verify_queue_correctness() -> bool:
    """Verify pop order before timing anything."""
    print("\n" + "=" * 60)
    print("Queue Correctness Verification")
    print("=" * 60)

    errors = []

    queue = create_benchmark_queue("verify")
    for element, priority in [(b"0", 5), (b"1", 10), (b"2", 3), (b"3", 4), (b"4", 6)]:
        queue.insert(element, priority)
    result = list(queue.drain())
    expected = [b"1", b"4", b"0", b"3", b"2"]
    if result != expected:
        errors.append(f"Distinct priorities: got {result}, expected {expected}")
    else:
        print(f"✓ Distinct priorities pop order: {result}")

    queue = create_benchmark_queue("verify")
    for element, priority in [(b"4", 10), (b"5", 8), (b"6", 10)]:
        queue.insert(element, priority)
    result = list(queue.drain())
    expected = [b"6", b"4", b"5"]
    if result != expected:
        errors.append(f"Shared priority: got {result}, expected {expected}")
    else:
        print(f"✓ Shared priority pop order: {result}")

    if errors:
        print(f"\n✗ {len(errors)} error(s):")
        for error in errors:
            print(f"  - {error}")
        return False

    print("\n✓ All correctness checks passed!")
    return True


# ============================================================================
# Main Benchmark Runner
# ============================================================================

def run_quick_benchmark() -> List[BenchmarkResult]:
    """Run quick benchmark suite."""
    print("=" * 60)
    print("Quick Queue Benchmark")
    print("=" * 60)

    results = [
        bench_append(100, 1000),
        bench_reencode(100, 1000),
        bench_insert(1000, 100, 1000),
        bench_pop(1000, 100, 500),
        bench_size(1000, 100, 200),
    ]
    for result in results:
        print(result)
        print()
    return results


def run_full_benchmark() -> List[BenchmarkResult]:
    """Run full benchmark suite."""
    print("=" * 60)
    print("Full Queue Benchmark Suite")
    print("=" * 60)

    results = []

    print("\n--- Packed List Append vs Re-encode ---")
    for tier_size in [10, 100, 1000]:
        append = bench_append(tier_size, 2000)
        reencode = bench_reencode(tier_size, 2000)
        print(append)
        print(reencode)
        print(f"Speedup: {reencode.mean_latency_us / append.mean_latency_us:.2f}x")
        print()
        results.extend([append, reencode])

    print("\n--- Remove Last ---")
    for tier_size in [1, 100, 1000]:
        results.append(bench_remove_last(tier_size, 2000))
        print(results[-1])
        print()

    print("\n--- Insert Performance ---")
    for size in [0, 1000, 10000]:
        for priority_range in [10, 100000]:
            results.append(bench_insert(size, priority_range, 5000))
            print(results[-1])
            print()

    print("\n--- Pop Performance ---")
    for size in [1000, 10000]:
        for priority_range in [10, 100000]:
            results.append(bench_pop(size, priority_range, 2000))
            print(results[-1])
            print()

    print("\n--- Size Performance ---")
    for priority_range in [10, 1000, 100000]:
        results.append(bench_size(10000, priority_range, 100))
        print(results[-1])
        print()

    return results


def main():
    parser = argparse.ArgumentParser(description="Queue Performance Benchmark")
    parser.add_argument("--quick", action="store_true", help="Run quick benchmark")
    parser.add_argument("--full", action="store_true", help="Run full benchmark suite")
    args = parser.parse_args()

    if not verify_queue_correctness():
        print("\n⚠ Correctness checks failed, aborting benchmarks")
        sys.exit(1)

    print()

    if args.full:
        results = run_full_benchmark()
    else:
        results = run_quick_benchmark()

    print("\n" + "=" * 60)
    print("Summary")
    print("=" * 60)

    for result in results:
        print(f"{result.name}: {result.mean_latency_us:.1f}μs mean, "
              f"{result.throughput_ops:,.0f} ops/s")

    print("\n✓ All benchmarks completed successfully!")


if __name__ == "__main__":
    main()
