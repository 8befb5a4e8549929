"""
imagefilter
===========
Pixel and neighbourhood image filters, composable into pipelines and run
row-parallel across a thread pool:
    models (Image, Color, Filter contract) → filters → pipeline → services → cli
"""
from .models import (
    Capability,
    Color,
    ExecutionConfig,
    Filter,
    Image,
    ImageFilterError,
    InvalidArgumentError,
    InvalidFilterStateError,
    UnknownFilterError,
    UnsupportedTransformError,
    WorkerFailureError,
)
from .pipeline import FilterPipeline
from .services import FilterExecutionService, FilterRegistry, ImageService, build_default_registry, run

__version__ = "1.0.0"
