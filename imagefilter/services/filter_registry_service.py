"""
Filter registry: resolves filter names and option maps to Filter instances,
and parses pipeline specs such as

    grayscale|scale(factor=0.5)|invert

Specs are split on '|' outside parentheses; each part is `name` or
`name(key=value,...)`. Names and option keys are case-insensitive.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Tuple
import logging

from ..filters import AutoBrightness, AutoContrast, EdgeDetection, GaussianBlur, Grayscale, Invert, Scale
from ..models.errors import InvalidArgumentError, UnknownFilterError
from ..models.filter import Filter
from ..pipeline.filter_pipeline import FilterPipeline

logger = logging.getLogger(__name__)

FilterFactory = Callable[[Dict[str, str]], Filter]


@dataclass(frozen=True)
class FilterInfo:
    factory: FilterFactory
    usage: str


def split_pipeline(spec: str) -> List[str]:
    """Split on '|' that is not inside parentheses."""
    parts: List[str] = []
    depth = 0
    start = 0
    for i, c in enumerate(spec):
        if c == "(":
            depth += 1
        elif c == ")":
            depth = max(0, depth - 1)
        elif c == "|" and depth == 0:
            parts.append(spec[start:i])
            start = i + 1
    parts.append(spec[start:])
    return parts


def parse_filter_spec(spec: str) -> Tuple[str, Dict[str, str]]:
    """
    "Scale(Factor=0.5)" -> ("scale", {"factor": "0.5"}).
    Pairs without '=' are ignored.
    """
    spec = spec.strip()
    options: Dict[str, str] = {}
    open_idx = spec.find("(")
    close_idx = spec.rfind(")")

    if open_idx != -1 and close_idx > open_idx:
        name = spec[:open_idx].strip().lower()
        for pair in spec[open_idx + 1:close_idx].split(","):
            key, sep, value = pair.strip().partition("=")
            if sep:
                options[key.strip().lower()] = value.strip()
    else:
        name = spec.lower()
    return name, options


class FilterRegistry:
    """
    Explicit registry value. Build one at startup (see build_default_registry)
    and pass it to whoever needs to resolve filters.
    """

    def __init__(self):
        self._entries: Dict[str, FilterInfo] = {}

    def register(self, name: str, factory: FilterFactory, usage: str) -> None:
        key = name.strip().lower()
        if not key:
            raise InvalidArgumentError("Filter name must not be empty")
        self._entries[key] = FilterInfo(factory, usage)

    def names(self) -> List[str]:
        return sorted(self._entries)

    def __contains__(self, name: str) -> bool:
        return name.strip().lower() in self._entries

    def listing(self) -> Dict[str, str]:
        """Registered names (sorted) mapped to their usage text."""
        return {name: self._entries[name].usage for name in self.names()}

    def resolve(self, name: str, options: Mapping[str, str] | None = None) -> Filter:
        info = self._entries.get(name.strip().lower())
        if info is None:
            raise UnknownFilterError(f"Unknown filter: {name}. Available: {', '.join(self.names())}")
        return info.factory(dict(options or {}))

    def create(self, spec: str, options: Mapping[str, str] | None = None) -> Filter:
        """
        Resolve a single-filter spec or a '|' pipeline spec.
        `options` (e.g. from the command line) only apply to a single-filter
        spec; options written in parentheses take precedence.
        """
        parts = [part.strip() for part in split_pipeline(spec)]
        if len(parts) == 1:
            name, inline = parse_filter_spec(parts[0])
            merged = {k.lower(): v for k, v in (options or {}).items()}
            merged.update(inline)
            return self.resolve(name, merged)

        filters = [self.resolve(*parse_filter_spec(part)) for part in parts]
        pipeline = FilterPipeline(filters)
        logger.debug(f"Built pipeline {pipeline.name}")
        return pipeline


def build_default_registry() -> FilterRegistry:
    registry = FilterRegistry()
    registry.register("autocontrast", lambda _: AutoContrast(), "Auto contrast adjustment")
    registry.register("autobrightness", lambda _: AutoBrightness(), "Auto brightness adjustment")
    registry.register("invert", lambda _: Invert(), "Inverts image colors")
    registry.register("grayscale", lambda _: Grayscale(), "Converts to grayscale")
    registry.register("edgedetection", lambda _: EdgeDetection(), "Detects edges")
    registry.register("gaussianblur", lambda _: GaussianBlur(), "Applies Gaussian blur")
    registry.register("scale", Scale.from_options, "Scales the image. Usage: scale(factor=0.5)")
    return registry
