"""
Time one filter across several thread counts.

    imagefilter-benchmark gaussianblur photo.jpg threads=1-8 wholeimage=false runs=5
"""
import argparse
import logging
import os
import sys
import time
from typing import Dict, List, Optional

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

logger = logging.getLogger(__name__)

DEFAULT_THREAD_COUNTS = [1, 2, 8, 16]


def parse_thread_counts(spec: str) -> List[int]:
    """
    "4"     -> [1, 2, 3, 4]
    "2-5"   -> [2, 3, 4, 5]
    "8,1,4" -> [1, 4, 8]
    """
    spec = spec.strip()
    try:
        if "," in spec:
            counts = sorted(int(part) for part in spec.split(",") if part.strip())
        elif "-" in spec:
            low, high = (int(part) for part in spec.split("-", 1))
            counts = list(range(low, high + 1))
        else:
            counts = list(range(1, int(spec) + 1))
    except ValueError:
        raise InvalidArgumentError(f"Invalid threads specification: {spec}") from None

    if not counts or any(count < 1 for count in counts):
        raise InvalidArgumentError(f"Thread counts must be a non-empty list of positive integers: {spec}")
    return counts


def benchmark(
    filter_spec: str,
    image,
    thread_counts: List[int],
    *,
    runs: int,
    allow_whole_image: bool,
    registry: FilterRegistry,
) -> Dict[int, float]:
    """
    Best wall time in seconds per thread count. A fresh filter per run, and one
    untimed warm-up run before each thread count.
    """
    best: Dict[int, float] = {}
    service = FilterExecutionService(ExecutionConfig(allow_whole_image=allow_whole_image))
    for threads in thread_counts:
        timings = []
        service.run(registry.create(filter_spec), image, threads=threads)  # warm-up
        for _ in tqdm(range(runs), desc=f"threads={threads}", ncols=70, leave=False):
            filter = registry.create(filter_spec)
            started = time.perf_counter()
            service.run(filter, image, threads=threads)
            timings.append(time.perf_counter() - started)
        best[threads] = min(timings)
        logger.debug(f"threads={threads}: best {best[threads] * 1000:.1f} ms over {runs} run(s)")
    return best


def main(argv: Optional[List[str]] = None) -> int:
    configure_logging()
    parser = argparse.ArgumentParser(prog="imagefilter-benchmark", description=__doc__.strip().splitlines()[0])
    parser.add_argument("filter", help="filter or pipeline spec")
    parser.add_argument("input", help="input image path")
    parser.add_argument("options", nargs="*", help="threads=<n>|<min>-<max>|<a,b,c>  wholeimage=true|false  runs=<k>")
    args = parser.parse_args(argv)

    registry = build_default_registry()
    try:
        options = dict(token.lower().split("=", 1) for token in args.options if "=" in token)
        thread_counts = parse_thread_counts(options["threads"]) if "threads" in options else DEFAULT_THREAD_COUNTS
        allow_whole_image = parse_bool(options.get("wholeimage", "true"))
        runs = int(options.get("runs", os.getenv("BENCHMARK_RUNS", "3")))
        if runs < 1:
            raise InvalidArgumentError(f"runs must be positive, got {runs}")

        image = ImageService().load(args.input)
        probe = registry.create(args.filter)
    except (ImageFilterError, OSError, ValueError) as err:
        print(f"Error: {err}", file=sys.stderr)
        return 1

    print(f"Benchmarking filter '{probe.name}' on image '{args.input}' ({image.width}x{image.height})")
    print(f"Testing thread counts: {thread_counts}")
    if allow_whole_image and probe.capability is Capability.WHOLE_IMAGE:
        print(f"{probe.name} has its own whole-image algorithm; thread count has no effect")

    try:
        best = benchmark(args.filter, image, thread_counts, runs=runs,
                         allow_whole_image=allow_whole_image, registry=registry)
    except ImageFilterError as err:
        print(f"Error: {err}", file=sys.stderr)
        return 1

    baseline = best[thread_counts[0]]
    print(f"{'threads':>8} | {'best ms':>10} | {'speed-up':>8}")
    for threads, seconds in best.items():
        speedup = baseline / seconds if seconds > 0 else float("inf")
        print(f"{threads:>8} | {seconds * 1000:>10.1f} | {speedup:>7.2f}x")
    return 0


if __name__ == "__main__":
    sys.exit(main())
