import numpy as np
import pytest

from imagefilter.models.color import Color
from imagefilter.models.errors import InvalidFilterStateError, UnsupportedTransformError
from imagefilter.models.filter import Capability, Filter
from imagefilter.models.image import Image

from conftest import RED, solid


class ConstantRedFilter(Filter):
    context_free = True

    @property
    def name(self):
        return "constantred"

    def transform_pixel(self, color):
        return RED


class CoordinateFilter(Filter):
    """Encodes the pixel position into the color."""
    context_aware = True

    @property
    def name(self):
        return "coordinates"

    def transform_pixel_at(self, image, x, y):
        return Color(x, y, image.get_pixel(x, y).b)


class DecliningContextFilter(Filter):
    """Declares both slots but declines the context-aware one."""
    context_free = True
    context_aware = True

    @property
    def name(self):
        return "declining"

    def transform_pixel_at(self, image, x, y):
        raise UnsupportedTransformError("not today")

    def transform_pixel(self, color):
        return Color(color.b, color.g, color.r)


class NoPrimitiveFilter(Filter):
    @property
    def name(self):
        return "empty"


def test_default_capability_and_slots():
    assert Filter.capability is Capability.PER_PIXEL
    assert not Filter.context_free
    assert not Filter.context_aware


def test_primitives_default_to_unsupported():
    f = NoPrimitiveFilter()
    img = solid(1, 1, RED)
    with pytest.raises(UnsupportedTransformError):
        f.transform_pixel(RED)
    with pytest.raises(UnsupportedTransformError):
        f.transform_pixel_at(img, 0, 0)


def test_context_free_filter_apply():
    result = ConstantRedFilter().apply(solid(3, 2, Color(1, 2, 3)))
    assert result.size == (3, 2)
    assert (result.pixels == RED.as_tuple()).all()


def test_context_aware_filter_apply():
    result = CoordinateFilter().apply(solid(4, 3, Color(0, 0, 9)))
    for y in range(3):
        for x in range(4):
            assert result.get_pixel(x, y) == Color(x, y, 9)


def test_fallback_when_context_aware_declines():
    result = DecliningContextFilter().apply(solid(2, 2, Color(10, 20, 30)))
    assert (result.pixels == (30, 20, 10)).all()


def test_no_primitive_is_invalid_state():
    with pytest.raises(InvalidFilterStateError):
        NoPrimitiveFilter().apply(solid(2, 2, RED))


def test_apply_does_not_touch_input():
    img = solid(2, 2, Color(5, 5, 5))
    before = img.pixels.copy()
    ConstantRedFilter().apply(img)
    assert np.array_equal(img.pixels, before)


def test_alpha_is_carried_over(random_rgba_image):
    result = ConstantRedFilter().apply(random_rgba_image)
    assert result.has_alpha
    assert np.array_equal(result.pixels[:, :, 3], random_rgba_image.pixels[:, :, 3])
    assert (result.rgb == RED.as_tuple()).all()


def test_transform_rows_shape():
    rows = CoordinateFilter().transform_rows(solid(5, 4, RED), 1, 3)
    assert rows.shape == (2, 5, 3)
    assert rows.dtype == np.uint8
    assert tuple(rows[0, 4]) == (4, 1, 0)


def test_render_rows_empty_range_is_noop():
    img = solid(2, 2, RED)
    out = img.new_buffer()
    ConstantRedFilter().render_rows(img, out, 1, 1)
    assert not out.any()


def test_repr_mentions_name():
    assert "constantred" in repr(ConstantRedFilter())
