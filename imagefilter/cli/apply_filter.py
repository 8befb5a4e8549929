"""
Apply a filter or a filter pipeline to an image.

    imagefilter list
    imagefilter grayscale input.jpg output.jpg
    imagefilter "grayscale|invert" input.jpg
    imagefilter scale input.jpg factor=0.5 threads=4
"""
import argparse
import logging
import os
import sys
import time
from typing import Dict, List, Optional, Tuple

from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from ..models.errors import ImageFilterError
from ..models.execution_config import ExecutionConfig, parse_bool
from ..services.filter_execution_service import FilterExecutionService
from ..services.filter_registry_service import FilterRegistry, build_default_registry
from ..services.image_service import ImageService

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s'


def configure_logging() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format=LOG_FORMAT,
        datefmt='%H:%M:%S'
    )


def split_output_and_options(extra: List[str]) -> Tuple[Optional[str], Dict[str, str]]:
    """
    First extra token is the output path unless it looks like key=value.
    Remaining key=value tokens become options (keys lower-cased).
    """
    output = None
    if extra and "=" not in extra[0]:
        output, extra = extra[0], extra[1:]

    options: Dict[str, str] = {}
    for token in extra:
        key, sep, value = token.partition("=")
        if sep:
            options[key.strip().lower()] = value
        else:
            logger.warning(f"Ignoring argument without '=': {token}")
    return output, options


def resolve_config(options: Dict[str, str], base: ExecutionConfig) -> ExecutionConfig:
    """Consume the reserved `threads` / `wholeimage` options."""
    threads = base.threads
    raw_threads = options.pop("threads", None)
    if raw_threads is not None:
        try:
            parsed = int(raw_threads)
            if parsed > 0:
                threads = parsed
            else:
                print(f"Invalid thread count: {raw_threads}", file=sys.stderr)
        except ValueError:
            print(f"Invalid thread count: {raw_threads}", file=sys.stderr)

    allow_whole_image = base.allow_whole_image
    raw_whole = options.pop("wholeimage", None)
    if raw_whole is not None:
        allow_whole_image = parse_bool(raw_whole)

    return ExecutionConfig(threads=threads, allow_whole_image=allow_whole_image)


def print_available_filters(registry: FilterRegistry) -> None:
    print("Available filters:")
    listing = registry.listing()
    width = max((len(name) for name in listing), default=20)
    for name, usage in listing.items():
        print(f"  {name:<{width}} - {usage}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="imagefilter",
        description="Apply an image filter or a '|' separated filter pipeline.",
    )
    parser.add_argument("filter", help="filter name, 'name(key=value,...)', a pipeline 'a|b|c', or 'list'")
    parser.add_argument("input", nargs="?", help="input image path")
    parser.add_argument("extra", nargs="*", help="[output] [key=value ...]; reserved keys: threads, wholeimage")
    return parser


def main(argv: Optional[List[str]] = None, registry: Optional[FilterRegistry] = None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)
    registry = registry or build_default_registry()

    if args.filter.lower() == "list":
        print_available_filters(registry)
        return 0

    if args.input is None:
        print("Missing input image path (see --help)", file=sys.stderr)
        return 2

    image_service = ImageService()
    try:
        output, options = split_output_and_options(args.extra)
        config = resolve_config(options, ExecutionConfig.from_env())
        image = image_service.load(args.input)

        filter = registry.create(args.filter, options)
        print(f"Using filter: {filter.name}")

        started = time.perf_counter()
        result = FilterExecutionService(config).run(filter, image)
        duration_ms = (time.perf_counter() - started) * 1000

        output_path = output or image_service.output_path_for(args.input, filter.name)
        saved = image_service.save(result, output_path)
    except (ImageFilterError, OSError) as err:
        logger.debug("Filter run failed", exc_info=True)
        print(f"Error: {err}", file=sys.stderr)
        return 1

    print(f"Saved to: {saved.resolve()}")
    print(f"Filter '{filter.name}' completed in {duration_ms:.0f} ms using {config.threads} threads")
    return 0


if __name__ == "__main__":
    sys.exit(main())
