import math

import numpy as np
import pytest

from triview.utils.image_utils import (
    IntensityLUT, build_lut, normalize_to_bytes, fit_to_box, resample_image, gray_to_rgba,
)


def test_neutral_lut_is_identity():
    lut = build_lut(1, 0)
    assert lut.dtype == np.uint8
    assert lut.shape == (256,)
    assert np.array_equal(lut, np.arange(256))


def test_lut_contrast_and_brightness():
    lut = build_lut(2.0, 0)
    assert lut[0] == 0
    assert lut[128] == 128
    assert lut[129] == 130
    assert lut[255] == 255

    lut = build_lut(1.0, 10)
    assert lut[0] == 10
    assert lut[245] == 255
    assert lut[255] == 255

    lut = build_lut(0.5, -128)
    assert lut[0] == 0
    assert lut[255] == 64


@pytest.mark.parametrize("contrast, brightness", [(math.nan, 0), (1, math.inf)])
def test_lut_rejects_non_finite(contrast, brightness):
    with pytest.raises(ValueError):
        build_lut(contrast, brightness)


def test_lut_cache_rebuilds_only_on_change():
    lut = IntensityLUT()
    first = lut.get(1.0, 0.0)
    assert lut.get(1.0, 0.0) is first
    assert lut.builds == 1
    second = lut.get(1.5, 0.0)
    assert lut.builds == 2
    assert not np.array_equal(first, second)
    lut.get(1.5, 5.0)
    assert lut.builds == 3
    assert not lut.get(1.5, 5.0).flags.writeable

    lut.invalidate()
    lut.get(1.5, 5.0)
    assert lut.builds == 4


def test_normalize_full_range():
    samples = np.array([0, 5, 10], dtype=np.int16)
    assert list(normalize_to_bytes(samples, 0, 10)) == [0, 127, 255]


def test_normalize_zero_range_is_full_scale():
    samples = np.full((3, 3), 42.0)
    assert np.all(normalize_to_bytes(samples, 42.0, 42.0) == 255)


def test_normalize_nan_and_out_of_range():
    samples = np.array([np.nan, -5.0, 20.0])
    assert list(normalize_to_bytes(samples, 0.0, 10.0)) == [0, 0, 255]


def test_fit_to_box_width_constrained():
    assert fit_to_box(100, 50, 1.0, 1.0, (400, 400)) == (400, 200)


def test_fit_to_box_height_constrained():
    assert fit_to_box(50, 100, 1.0, 1.0, (400, 400)) == (200, 400)


def test_fit_to_box_uses_spacing():
    # 100 x 100 voxels at 1 x 2 mm is twice as tall as wide
    assert fit_to_box(100, 100, 1.0, 2.0, (300, 300)) == (150, 300)


def test_fit_to_box_without_box_uses_physical_size():
    assert fit_to_box(10, 20, 2.0, 1.0, (0, 0)) == (20, 20)


def test_fit_to_box_rounds_half_up():
    assert fit_to_box(1, 1, 2.5, 1.0, (100, 1)) == (3, 1)
    assert fit_to_box(5, 1, 0.5, 1.0, (0, 0)) == (3, 1)


def test_resample_keeps_uniform_image_uniform():
    image = np.full((4, 6), 200, dtype=np.uint8)
    out = resample_image(image, (37, 55))
    assert out.shape == (37, 55)
    assert np.all(out == 200)


def test_resample_same_shape_copies():
    image = np.arange(12, dtype=np.uint8).reshape(3, 4)
    out = resample_image(image, (3, 4))
    assert np.array_equal(out, image)
    assert out is not image


def test_gray_to_rgba():
    rgba = gray_to_rgba(np.array([[0, 100]], dtype=np.uint8))
    assert rgba.shape == (1, 2, 4)
    assert rgba[0, 1].tolist() == [100, 100, 100, 255]
