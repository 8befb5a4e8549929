from __future__ import annotations
from dataclasses import dataclass, field
import os

from dotenv import load_dotenv

from .errors import InvalidArgumentError

# Load environment variables
load_dotenv()

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def default_thread_count() -> int:
    """Host parallelism, never less than one."""
    return os.cpu_count() or 1


def parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise InvalidArgumentError(f"Invalid boolean value: {value!r}")


@dataclass(frozen=True)
class ExecutionConfig:
    """
    How the execution service runs a filter.

    threads : worker count for the per-pixel path (positive)
    allow_whole_image : delegate to a filter's own whole-image algorithm when it has one
    """
    threads: int = field(default_factory=default_thread_count)
    allow_whole_image: bool = True

    def __post_init__(self):
        if isinstance(self.threads, bool) or not isinstance(self.threads, int) or self.threads < 1:
            raise InvalidArgumentError(f"Thread count must be a positive integer, got {self.threads!r}")

    def with_threads(self, threads: int) -> ExecutionConfig:
        return ExecutionConfig(threads=threads, allow_whole_image=self.allow_whole_image)

    @classmethod
    def from_env(cls) -> ExecutionConfig:
        """
        Build a config from FILTER_THREADS / FILTER_ALLOW_WHOLE_IMAGE.
        Unset variables fall back to the defaults.
        """
        threads_raw = os.getenv("FILTER_THREADS")
        allow_raw = os.getenv("FILTER_ALLOW_WHOLE_IMAGE", "true")

        if threads_raw:
            try:
                threads = int(threads_raw)
            except ValueError:
                raise InvalidArgumentError(f"FILTER_THREADS must be an integer, got {threads_raw!r}") from None
        else:
            threads = default_thread_count()

        return cls(threads=threads, allow_whole_image=parse_bool(allow_raw))
