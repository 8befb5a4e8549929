from .color import BLACK, WHITE, Color
from .errors import (
    ImageFilterError,
    InvalidArgumentError,
    InvalidFilterStateError,
    UnknownFilterError,
    UnsupportedTransformError,
    WorkerFailureError,
)
from .execution_config import ExecutionConfig
from .filter import Capability, Filter
from .image import Image
