class ImageFilterError(Exception):
    """Base class for every error raised by imagefilter."""


class InvalidArgumentError(ImageFilterError, ValueError):
    """Bad constructor parameter, missing image, empty pipeline, bad config."""


class UnsupportedTransformError(ImageFilterError, NotImplementedError):
    """
    A filter does not implement one of the two pixel primitives.
    Only ever used as a fallback signal; never reaches the caller.
    """


class InvalidFilterStateError(ImageFilterError, RuntimeError):
    """Neither pixel primitive is available for a per-pixel run."""


class UnknownFilterError(ImageFilterError, KeyError):
    """Registry lookup miss."""

    def __str__(self) -> str:
        # KeyError would repr() the message
        return str(self.args[0]) if self.args else ""


class WorkerFailureError(ImageFilterError, RuntimeError):
    """Unexpected exception inside a parallel partition."""
