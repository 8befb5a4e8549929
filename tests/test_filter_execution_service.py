import threading

import numpy as np
import pytest

from imagefilter.filters import (
    AutoBrightness,
    AutoContrast,
    EdgeDetection,
    GaussianBlur,
    Grayscale,
    Invert,
    Scale,
)
from imagefilter.models.color import BLACK, Color
from imagefilter.models.errors import (
    InvalidArgumentError,
    InvalidFilterStateError,
    WorkerFailureError,
)
from imagefilter.models.execution_config import ExecutionConfig
from imagefilter.models.filter import Capability, Filter
from imagefilter.models.image import Image
from imagefilter.pipeline.filter_pipeline import FilterPipeline
from imagefilter.services import filter_execution_service
from imagefilter.services.filter_execution_service import FilterExecutionService, partition_rows

from conftest import RED, solid


class ConstantRedFilter(Filter):
    context_free = True

    @property
    def name(self):
        return "constantred"

    def transform_pixel(self, color):
        return RED


class BlackApplyOnlyFilter(ConstantRedFilter):
    capability = Capability.WHOLE_IMAGE

    @property
    def name(self):
        return "blackapplyonly"

    def apply(self, image):
        return solid(image.width, image.height, BLACK)


class PositionFilter(Filter):
    """Context-aware, output depends on position and on neighbours."""
    context_aware = True

    @property
    def name(self):
        return "position"

    def transform_pixel_at(self, image, x, y):
        right = image.get_pixel(min(x + 1, image.width - 1), y)
        return Color((x * 7 + right.r) % 256, (y * 13) % 256, right.b)


class RowRecordingFilter(ConstantRedFilter):
    def __init__(self):
        self.lock = threading.Lock()
        self.rows = []

    def transform_rows(self, image, y_start, y_stop):
        with self.lock:
            self.rows.extend(range(y_start, y_stop))
        return super().transform_rows(image, y_start, y_stop)


class FailingRowFilter(ConstantRedFilter):
    def __init__(self, bad_row):
        self.bad_row = bad_row

    def transform_pixel_at(self, image, x, y):
        if y == self.bad_row:
            raise RuntimeError(f"row {y} is cursed")
        return RED

    context_aware = True


class NoPrimitiveFilter(Filter):
    @property
    def name(self):
        return "empty"


@pytest.fixture
def service():
    return FilterExecutionService(ExecutionConfig(threads=4))


# ── Partitioning ─────────────────────────────────────────────────────
@pytest.mark.parametrize("height", [1, 2, 3, 7, 10, 64, 101])
@pytest.mark.parametrize("workers", [-1, 0, 1, 2, 3, 8, 200])
def test_partitions_cover_every_row_once(height, workers):
    ranges = partition_rows(height, workers)
    rows = [y for lo, hi in ranges for y in range(lo, hi)]
    assert rows == list(range(height))
    assert len(ranges) == max(1, min(workers, height))
    sizes = [hi - lo for lo, hi in ranges]
    assert max(sizes) - min(sizes) <= 1


# ── Argument handling ────────────────────────────────────────────────
@pytest.mark.parametrize("threads", [2.0, "4", True])
def test_non_integer_thread_override(service, threads):
    with pytest.raises(InvalidArgumentError):
        service.run(Grayscale(), solid(2, 2, RED), threads=threads)


def test_integer_like_thread_override(service):
    out = service.run(Invert(), solid(2, 4, RED), threads=np.int64(2))
    assert out.get_pixel(1, 3) == Color(0, 255, 255)


def test_missing_arguments(service):
    with pytest.raises(InvalidArgumentError):
        service.run(None, solid(1, 1, RED))
    with pytest.raises(InvalidArgumentError):
        service.run(Grayscale(), None)


# ── Per-pixel path ───────────────────────────────────────────────────
@pytest.mark.parametrize("threads", [-2, 0, 1, 2, 3, 16])
def test_constant_filter_any_thread_count(service, threads):
    out = service.run(ConstantRedFilter(), solid(3, 3, BLACK), threads=threads)
    assert (out.pixels == RED.as_tuple()).all()


@pytest.mark.parametrize("make_filter", [Grayscale, Invert, GaussianBlur, PositionFilter, AutoContrast])
def test_parallel_matches_serial(service, random_image, make_filter):
    serial = service.run(make_filter(), random_image, threads=1, allow_whole_image=False)
    parallel = service.run(make_filter(), random_image, threads=5, allow_whole_image=False)
    assert parallel.pixels.tobytes() == serial.pixels.tobytes()


@pytest.mark.parametrize("make_filter", [Grayscale, Invert, GaussianBlur, PositionFilter])
def test_parallel_matches_default_apply(service, random_rgba_image, make_filter):
    expected = make_filter().apply(random_rgba_image)
    out = service.run(make_filter(), random_rgba_image, threads=4)
    assert np.array_equal(out.pixels, expected.pixels)


def test_every_row_rendered_exactly_once(service):
    f = RowRecordingFilter()
    service.run(f, solid(4, 37, BLACK), threads=6)
    assert sorted(f.rows) == list(range(37))


def test_input_is_untouched(service, random_image):
    before = random_image.pixels.copy()
    service.run(Invert(), random_image, threads=3)
    assert np.array_equal(random_image.pixels, before)


# ── Whole-image delegation ───────────────────────────────────────────
def test_whole_image_override_is_used(service):
    out = service.run(BlackApplyOnlyFilter(), solid(2, 2, Color(9, 9, 9)), threads=4)
    assert not out.pixels.any()


def test_whole_image_override_can_be_disabled(service):
    out = service.run(BlackApplyOnlyFilter(), solid(2, 2, Color(9, 9, 9)), threads=2, allow_whole_image=False)
    assert (out.pixels == RED.as_tuple()).all()


def test_config_decides_when_arguments_omitted():
    service = FilterExecutionService(ExecutionConfig(threads=2, allow_whole_image=False))
    out = service.run(BlackApplyOnlyFilter(), solid(2, 2, Color(9, 9, 9)))
    assert (out.pixels == RED.as_tuple()).all()


@pytest.mark.parametrize("f", [AutoBrightness(), EdgeDetection(), Scale(2.0),
                               FilterPipeline([Grayscale(), Invert()])])
def test_whole_image_filters_need_override(service, random_image, f):
    with pytest.raises(InvalidFilterStateError):
        service.run(f, random_image, threads=3, allow_whole_image=False)


def test_scale_changes_dimensions_through_service(service, corners_image):
    out = service.run(Scale(2.0), corners_image)
    assert out.size == (4, 4)


def test_pipeline_scenario(service):
    out = service.run(FilterPipeline([Grayscale(), Invert()]), solid(1, 1, RED))
    assert out.get_pixel(0, 0) == Color(179, 179, 179)


# ── Failures ─────────────────────────────────────────────────────────
@pytest.mark.parametrize("threads", [1, 4])
def test_worker_error_is_wrapped(service, threads):
    with pytest.raises(WorkerFailureError) as excinfo:
        service.run(FailingRowFilter(bad_row=5), solid(3, 8, BLACK), threads=threads)
    assert isinstance(excinfo.value.__cause__, RuntimeError)


@pytest.mark.parametrize("threads", [1, 4])
def test_library_errors_propagate_unchanged(service, threads):
    with pytest.raises(InvalidFilterStateError):
        service.run(NoPrimitiveFilter(), solid(3, 8, BLACK), threads=threads)


# ── Module-level shortcut ────────────────────────────────────────────
def test_module_run(random_image):
    out = filter_execution_service.run(Invert(), random_image, threads=2)
    assert np.array_equal(out.pixels, 255 - random_image.pixels)
