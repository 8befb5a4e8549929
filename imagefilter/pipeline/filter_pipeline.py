from __future__ import annotations
from typing import Iterable, List, Tuple
import logging

from ..models.color import Color
from ..models.errors import InvalidArgumentError, UnsupportedTransformError
from ..models.filter import Capability, Filter
from ..models.image import Image

logger = logging.getLogger(__name__)


class FilterPipeline(Filter):
    """
    Ordered, flat composition of filters applied one after another.

    Nested pipelines are replaced by their members at construction, so
    FilterPipeline([FilterPipeline([a, b]), c]).name == "a|b|c".
    Only whole-image apply() is meaningful: a neighbourhood filter in the
    middle needs the previous step's output fully materialized.
    """

    capability = Capability.WHOLE_IMAGE

    def __init__(self, filters: Iterable[Filter] | None):
        if filters is None:
            raise InvalidArgumentError("FilterPipeline requires at least one filter")
        flat = self._flatten(filters)
        if not flat:
            raise InvalidArgumentError("FilterPipeline requires at least one filter")
        self._filters: Tuple[Filter, ...] = tuple(flat)

    @staticmethod
    def _flatten(filters: Iterable[Filter]) -> List[Filter]:
        result: List[Filter] = []
        for f in filters:
            if isinstance(f, FilterPipeline):
                # already flat
                result.extend(f.filters)
            elif isinstance(f, Filter):
                result.append(f)
            else:
                raise InvalidArgumentError(f"Pipeline members must be filters, got {type(f).__name__}")
        return result

    @property
    def filters(self) -> Tuple[Filter, ...]:
        return self._filters

    @property
    def name(self) -> str:
        return "|".join(f.name for f in self._filters)

    def __len__(self) -> int:
        return len(self._filters)

    def apply(self, image: Image) -> Image:
        current = image
        for step, f in enumerate(self._filters, 1):
            logger.debug(f"Pipeline step {step}/{len(self._filters)}: {f.name}")
            current = f.apply(current)
        return current

    def transform_pixel(self, color: Color) -> Color:
        raise UnsupportedTransformError("FilterPipeline does not support transform_pixel(color) directly")

    def transform_pixel_at(self, image: Image, x: int, y: int) -> Color:
        raise UnsupportedTransformError("FilterPipeline does not support transform_pixel_at(image, x, y) directly")
