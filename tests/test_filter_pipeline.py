import numpy as np
import pytest

from imagefilter.filters import Grayscale, Invert, Scale
from imagefilter.models.color import Color
from imagefilter.models.errors import InvalidArgumentError, UnsupportedTransformError
from imagefilter.models.filter import Capability, Filter
from imagefilter.pipeline.filter_pipeline import FilterPipeline

from conftest import RED, solid


class Named(Filter):
    context_free = True

    def __init__(self, label):
        self.label = label

    @property
    def name(self):
        return self.label

    def transform_pixel(self, color):
        return color


class Exploding(Filter):
    capability = Capability.WHOLE_IMAGE

    @property
    def name(self):
        return "exploding"

    def apply(self, image):
        raise RuntimeError("boom")


class Recording(Filter):
    capability = Capability.WHOLE_IMAGE

    def __init__(self):
        self.calls = 0

    @property
    def name(self):
        return "recording"

    def apply(self, image):
        self.calls += 1
        return image


def test_flattening_name():
    inner = FilterPipeline([Named("A"), Named("B")])
    outer = FilterPipeline([inner, Named("C")])
    assert outer.name == "A|B|C"
    assert len(outer) == 3
    assert not any(isinstance(f, FilterPipeline) for f in outer.filters)


def test_deep_nesting_is_flat():
    a = FilterPipeline([Named("a")])
    b = FilterPipeline([a, Named("b")])
    c = FilterPipeline([Named("x"), b, FilterPipeline([b])])
    assert c.name == "x|a|b|a|b"
    assert all(not isinstance(f, FilterPipeline) for f in c.filters)


@pytest.mark.parametrize("filters", [None, [], iter([])])
def test_empty_pipeline_rejected(filters):
    with pytest.raises(InvalidArgumentError):
        FilterPipeline(filters)


def test_non_filter_member_rejected():
    with pytest.raises(InvalidArgumentError):
        FilterPipeline([Grayscale(), "invert"])


def test_grayscale_then_invert_on_red():
    out = FilterPipeline([Grayscale(), Invert()]).apply(solid(1, 1, RED))
    assert out.get_pixel(0, 0) == Color(179, 179, 179)


def test_order_matters_for_size_changes():
    out = FilterPipeline([Scale(2.0), Scale(0.5), Invert()]).apply(solid(3, 5, RED))
    assert out.size == (3, 5)
    assert (out.pixels == (0, 255, 255)).all()


def test_first_failure_aborts():
    recorder = Recording()
    pipeline = FilterPipeline([Grayscale(), Exploding(), recorder])
    with pytest.raises(RuntimeError, match="boom"):
        pipeline.apply(solid(2, 2, RED))
    assert recorder.calls == 0


def test_primitives_unsupported():
    pipeline = FilterPipeline([Grayscale()])
    assert pipeline.capability is Capability.WHOLE_IMAGE
    with pytest.raises(UnsupportedTransformError):
        pipeline.transform_pixel(RED)
    with pytest.raises(UnsupportedTransformError):
        pipeline.transform_pixel_at(solid(1, 1, RED), 0, 0)


def test_input_is_not_modified(random_image):
    before = random_image.pixels.copy()
    FilterPipeline([Grayscale(), Invert()]).apply(random_image)
    assert np.array_equal(random_image.pixels, before)
