from .filter_execution_service import FilterExecutionService, partition_rows, run
from .filter_registry_service import FilterRegistry, build_default_registry, parse_filter_spec, split_pipeline
from .image_service import ImageService
