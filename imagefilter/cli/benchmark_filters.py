"""
Compare several filters across thread counts.

    imagefilter-benchmark-filters grayscale gaussianblur photo.jpg threads=1,2,8 warmup=2 measured=5
"""
import argparse
import logging
import os
import sys
import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np
from dotenv import load_dotenv
from tqdm import tqdm

# Load environment variables first
load_dotenv()

from ..models.errors import ImageFilterError, InvalidArgumentError
from ..models.execution_config import ExecutionConfig, parse_bool
from ..models.filter import Capability
from ..services.filter_execution_service import FilterExecutionService
from ..services.filter_registry_service import FilterRegistry, build_default_registry
from ..services.image_service import ImageService
from .apply_filter import configure_logging
from .benchmark_threads import DEFAULT_THREAD_COUNTS, parse_thread_counts

logger = logging.getLogger(__name__)

DEFAULT_WARMUP_RUNS = 3
DEFAULT_MEASURED_RUNS = 5


@dataclass(frozen=True)
class RunStats:
    """Timings of the measured runs for one filter at one thread count, in ms."""
    timings_ms: Tuple[float, ...]

    @property
    def average(self) -> float:
        return float(np.mean(self.timings_ms))

    @property
    def stddev(self) -> float:
        # population deviation
        return float(np.std(self.timings_ms))

    @property
    def minimum(self) -> float:
        return min(self.timings_ms)

    @property
    def maximum(self) -> float:
        return max(self.timings_ms)

    @property
    def rounded_average(self) -> int:
        return int(self.average + 0.5)


Results = Dict[str, Dict[int, RunStats]]


def split_arguments(tokens: List[str]) -> Tuple[List[str], str, Dict[str, str]]:
    """
    Filters come first, then the input image; `key=value` tokens are options.
    The last token without '=' is the input path.
    """
    options: Dict[str, str] = {}
    positional: List[str] = []
    for token in tokens:
        key, sep, value = token.partition("=")
        if sep:
            options[key.strip().lower()] = value.strip()
        else:
            positional.append(token)

    if len(positional) < 2:
        raise InvalidArgumentError("Expected at least one filter followed by an input image path")
    return positional[:-1], positional[-1], options


def _positive_int(options: Dict[str, str], key: str, default: int) -> int:
    raw = options.get(key)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise InvalidArgumentError(f"{key} must be an integer, got {raw!r}") from None
    if value < 1 and not (key == "warmup" and value == 0):
        raise InvalidArgumentError(f"{key} must be positive, got {value}")
    return value


def benchmark_filter(
    filter_spec: str,
    image,
    thread_counts: List[int],
    *,
    warmup: int,
    measured: int,
    allow_whole_image: bool,
    registry: FilterRegistry,
) -> Dict[int, RunStats]:
    """Warm-up runs, then `measured` timed runs per thread count."""
    service = FilterExecutionService(ExecutionConfig(allow_whole_image=allow_whole_image))
    stats: Dict[int, RunStats] = {}
    for threads in thread_counts:
        filter = registry.create(filter_spec)
        for _ in range(warmup):
            service.run(filter, image, threads=threads)

        timings = []
        for _ in tqdm(range(measured), desc=f"{filter.name} x{threads}", ncols=70, leave=False):
            started = time.perf_counter()
            service.run(filter, image, threads=threads)
            timings.append((time.perf_counter() - started) * 1000)
        stats[threads] = RunStats(tuple(timings))
        logger.debug(f"{filter.name} @ {threads} threads: {stats[threads].average:.1f} ms average")
    return stats


def _thread_label(threads: int) -> str:
    return f"{threads} thread" + ("" if threads == 1 else "s")


def format_summary(results: Results, thread_counts: List[int]) -> List[str]:
    """
    Table of rounded average times, one row per filter. The fastest cell of
    each row is marked with '*'.
    """
    filter_width = max([len("Filter")] + [len(name) for name in results]) + 2
    labels = [_thread_label(t) for t in thread_counts]
    cell_width = max([9] + [len(label) for label in labels]) + 1

    lines = [f"{'Filter':<{filter_width}}" + "".join(f"{label:>{cell_width}}" for label in labels)]
    lines.append("=" * (filter_width + cell_width * len(thread_counts)))
    for name, per_thread in results.items():
        fastest = min(s.rounded_average for s in per_thread.values())
        row = f"{name:<{filter_width}}"
        for threads in thread_counts:
            stats = per_thread.get(threads)
            if stats is None:
                cell = "-"
            else:
                cell = f"{stats.rounded_average} ms"
                if stats.rounded_average == fastest:
                    cell += "*"
            row += f"{cell:>{cell_width}}"
        lines.append(row)
    lines.append("")
    lines.append("* = fastest config for that filter")
    return lines


def fastest_overall(results: Results) -> Optional[Tuple[str, int, int]]:
    """(filter, threads, rounded average ms) of the quickest cell; first one wins ties."""
    best = None
    for name, per_thread in results.items():
        for threads, stats in per_thread.items():
            if best is None or stats.rounded_average < best[2]:
                best = (name, threads, stats.rounded_average)
    return best


def main(argv: Optional[List[str]] = None) -> int:
    configure_logging()
    parser = argparse.ArgumentParser(prog="imagefilter-benchmark-filters", description=__doc__.strip().splitlines()[0])
    parser.add_argument(
        "arguments", nargs="+",
        help="<filter> [filter ...] <input> [threads=...] [wholeimage=true|false] [warmup=n] [measured=n]",
    )
    args = parser.parse_args(argv)

    registry = build_default_registry()
    try:
        filter_specs, input_path, options = split_arguments(args.arguments)
        thread_counts = parse_thread_counts(options["threads"]) if "threads" in options else DEFAULT_THREAD_COUNTS
        allow_whole_image = parse_bool(options.get("wholeimage", "true"))
        warmup = _positive_int(options, "warmup", int(os.getenv("BENCHMARK_WARMUP_RUNS", DEFAULT_WARMUP_RUNS)))
        measured = _positive_int(options, "measured", int(os.getenv("BENCHMARK_MEASURED_RUNS", DEFAULT_MEASURED_RUNS)))

        image = ImageService().load(input_path)
        probes = [registry.create(spec) for spec in filter_specs]
    except (ImageFilterError, OSError, ValueError) as err:
        print(f"Error: {err}", file=sys.stderr)
        return 1

    print(f"Benchmarking {', '.join(p.name for p in probes)} on image '{input_path}' ({image.width}x{image.height})")
    print(f"Testing thread counts: {thread_counts}")
    print(f"Warm-up runs: {warmup}")
    print(f"Measured runs: {measured}")

    results: Results = {}
    try:
        for spec, probe in zip(filter_specs, probes):
            print(f"\n-- {probe.name} --")
            if allow_whole_image and probe.capability is Capability.WHOLE_IMAGE:
                print(f"Using {probe.name}'s own whole-image algorithm")
            elif allow_whole_image:
                print("No whole-image algorithm, using the per-pixel transform")
            else:
                print("Forcing the per-pixel transform")

            per_thread = benchmark_filter(spec, image, thread_counts, warmup=warmup, measured=measured,
                                          allow_whole_image=allow_whole_image, registry=registry)
            for threads, stats in per_thread.items():
                print(f"Threads: {threads:>3} -> Avg: {stats.average:6.1f} ms  sd={stats.stddev:.1f}  "
                      f"Min: {stats.minimum:.1f} ms  Max: {stats.maximum:.1f} ms")
            best_threads = min(per_thread, key=lambda t: per_thread[t].average)
            print(f"Best average: {per_thread[best_threads].rounded_average} ms @ {best_threads} threads")
            results[probe.name] = per_thread
    except ImageFilterError as err:
        print(f"Error: {err}", file=sys.stderr)
        return 1

    print("\nBenchmark Summary (Average Times in ms)")
    for line in format_summary(results, thread_counts):
        print(line)

    best = fastest_overall(results)
    if best is not None:
        name, threads, avg_ms = best
        print(f"\nFastest overall: {name} @ {_thread_label(threads)} -> {avg_ms} ms")
    return 0


if __name__ == "__main__":
    sys.exit(main())
