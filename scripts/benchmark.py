#!/usr/bin/env python3
"""
JoinX Performance Benchmarks

Measures how the full-rebuild strategy scales: every change to any source
rebuilds the composite's position table in O(total items). Each benchmark
grows its workload until one run takes longer than the time limit, then
reports the largest workload reached.

Usage:
    python scripts/benchmark.py            # Run all benchmarks
    python scripts/benchmark.py --config   # Show current benchmark configuration
    python scripts/benchmark.py --quiet    # Only show the final table

Configuration:
    Adjust the constants at the top of the file to change benchmark parameters.
"""

import argparse
import sys
import time
from typing import Any, Callable, Dict

# Add the project root to the Python path
sys.path.insert(0, ".")

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from joinx import CompositeList, ListSource, SourceBinding

# Configuration constants - adjust these to change benchmark behavior
TIME_LIMIT_SECONDS = 0.5  # Maximum time allowed per run
STARTING_N = 100  # Starting number of items
SCALE_FACTOR = 2.0  # How much to multiply N by each iteration
SOURCE_COUNT = 8  # Sources the items are spread over
TYPES_PER_SOURCE = 4


def _make_sources(n: int):
    """Spread n items over SOURCE_COUNT sources with TYPES_PER_SOURCE types each."""
    per_source = max(n // SOURCE_COUNT, 1)
    tags = tuple(range(TYPES_PER_SOURCE))
    return [
        ListSource(
            range(per_source),
            type_of=lambda item: item % TYPES_PER_SOURCE,
            type_tags=tags,
            key=f"source-{i}",
        )
        for i in range(SOURCE_COUNT)
    ]


class JoinxBenchmark:
    """Rich-formatted display for JoinX performance benchmarking."""

    def __init__(self, quiet: bool = False):
        self.console = Console()
        self.quiet = quiet
        self.results: Dict[str, Dict[str, Any]] = {}

    def run_benchmarks(self):
        """Run all benchmarks and display results with rich formatting."""
        start_time = time.time()

        self._display_header()

        self._run_rebuild_benchmark()
        self._run_append_benchmark()
        self._run_lookup_benchmark()

        self._display_final_results(start_time)

    def _run_rebuild_benchmark(self):
        """Time one full rebuild over n items."""

        def operation(n):
            composite = CompositeList(*_make_sources(n), auto_update=False)
            start = time.perf_counter()
            composite.on_contents_changed()
            return composite.item_count(), time.perf_counter() - start

        self._record("rebuild", "Full Rebuild", operation)

    def _run_append_benchmark(self):
        """Time 100 appends to the last source, each forcing a rebuild."""

        def operation(n):
            sources = _make_sources(n)
            composite = CompositeList(*sources)
            start = time.perf_counter()
            for i in range(100):
                sources[-1].append(i)
            elapsed = time.perf_counter() - start
            composite.close()
            return 100, elapsed

        self._record("append", "Append + Rebuild", operation)

    def _run_lookup_benchmark(self):
        """Time resolving and rendering every position once."""

        def operation(n):
            composite = CompositeList(*[SourceBinding(s) for s in _make_sources(n)])
            start = time.perf_counter()
            for position in range(composite.item_count()):
                composite.render(None, position)
            return composite.item_count(), time.perf_counter() - start

        self._record("lookup", "Resolve + Render", operation)

    def _record(self, key: str, name: str, operation: Callable[[int], Any]):
        if not self.quiet:
            self.console.print(f"[yellow]Running {name}...[/yellow]")
        result = self._run_adaptive_benchmark(operation)
        self.results[key] = dict(result, name=name)
        if not self.quiet:
            self.console.print(
                f"[green]✓[/green] {name}: {result['operations_per_second']:,.0f} ops/sec "
                f"({result['max_n']:,} items)"
            )

    def _run_adaptive_benchmark(self, operation_func):
        """Scale the workload until a single run reaches the time limit."""
        n = STARTING_N

        while True:
            operations, operation_time = operation_func(n)
            operations_per_second = operations / max(operation_time, 1e-9)

            current_result = {
                "max_n": n,
                "operation_time": operation_time,
                "operations_per_second": operations_per_second,
            }

            if operation_time >= TIME_LIMIT_SECONDS:
                return current_result
            n = int(n * SCALE_FACTOR)

    def _display_header(self):
        """Display the benchmark header."""
        header = Panel(
            Align.center("JoinX Rebuild Benchmark Suite"),
            title="JoinX Benchmarks",
            border_style="blue",
        )
        self.console.print(header)
        self.console.print()

    def _display_final_results(self, start_time: float):
        """Display the summary table."""
        elapsed = time.time() - start_time

        table = Table(title="Final Benchmark Results")
        table.add_column("Benchmark", style="cyan", no_wrap=True)
        table.add_column("Max Workload", style="magenta", justify="right")
        table.add_column("Last Run", style="yellow", justify="right")
        table.add_column("Performance", style="green", justify="right")

        for result in self.results.values():
            table.add_row(
                result["name"],
                f"{result['max_n']:,} items",
                f"{result['operation_time'] * 1000:.1f} ms",
                f"{result['operations_per_second'] / 1000:.1f}K ops/sec",
            )

        self.console.print()
        self.console.print(table)
        self.console.print(f"\n[dim]Completed in {elapsed:.1f}s[/dim]")


def print_config():
    """Print the current benchmark configuration."""
    print("JoinX Benchmark Configuration:")
    print(f"  TIME_LIMIT_SECONDS: {TIME_LIMIT_SECONDS}")
    print(f"  STARTING_N: {STARTING_N}")
    print(f"  SCALE_FACTOR: {SCALE_FACTOR}")
    print(f"  SOURCE_COUNT: {SOURCE_COUNT}")
    print(f"  TYPES_PER_SOURCE: {TYPES_PER_SOURCE}")


def main():
    """Main entry point for the benchmark script."""
    parser = argparse.ArgumentParser(description="JoinX Performance Benchmarks")
    parser.add_argument(
        "--config", action="store_true", help="Show current benchmark configuration"
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output, show only final results",
    )

    args = parser.parse_args()

    if args.config:
        print_config()
        return

    if not args.quiet:
        print_config()
        print()

    JoinxBenchmark(quiet=args.quiet).run_benchmarks()


if __name__ == "__main__":
    main()
