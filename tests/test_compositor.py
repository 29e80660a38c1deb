import numpy as np
import pytest

from conftest import transparent_rgba
from image_converter.color import WHITE, BackgroundColor
from image_converter.errors import MissingBackgroundError
from image_converter.image_engine.compositor import (
    ConversionMode,
    composite_over,
    flatten_for_target,
    has_transparency,
    resolve_background,
)
from image_converter.image_engine.pixel_buffer import PixelBuffer


def _pixel(r, g, b, a) -> PixelBuffer:
    return PixelBuffer.from_array(np.array([[[r, g, b, a]]], dtype=np.uint8))


def test_alpha_zero_over_white_is_white():
    out = composite_over(_pixel(10, 200, 30, 0), WHITE)
    assert out.pixels[0, 0].tolist() == [255, 255, 255]


def test_alpha_full_keeps_source():
    out = composite_over(_pixel(10, 200, 30, 255), BackgroundColor(1, 2, 3))
    assert out.pixels[0, 0].tolist() == [10, 200, 30]


def test_alpha_half_is_near_linear_midpoint():
    src = (0, 100, 255)
    out = composite_over(_pixel(*src, 128), WHITE)
    a = 128 / 255
    for c, s in enumerate(src):
        expected = (1 - a) * 255 + a * s
        assert abs(int(out.pixels[0, 0, c]) - expected) <= 1


def test_opaque_input_matches_dropping_alpha():
    rng = np.random.default_rng(7)
    arr = rng.integers(0, 256, size=(9, 11, 4), dtype=np.uint8)
    arr[:, :, 3] = 255
    buf = PixelBuffer.from_array(arr)
    out = composite_over(buf, BackgroundColor(12, 34, 56))
    assert out.channels == 3
    assert np.array_equal(out.pixels, arr[:, :, :3])


def test_composite_does_not_mutate_input():
    arr = transparent_rgba()
    buf = PixelBuffer.from_array(arr)
    before = buf.pixels.copy()
    composite_over(buf, BackgroundColor(0, 0, 255))
    assert np.array_equal(buf.pixels, before)


def test_composite_rejects_rgb():
    with pytest.raises(ValueError):
        composite_over(PixelBuffer.from_array(np.zeros((2, 2, 3), dtype=np.uint8)), WHITE)


def test_has_transparency():
    assert has_transparency(PixelBuffer.from_array(transparent_rgba()))
    opaque = np.full((3, 3, 4), 255, dtype=np.uint8)
    assert not has_transparency(PixelBuffer.from_array(opaque))
    assert not has_transparency(PixelBuffer.from_array(np.zeros((3, 3, 3), dtype=np.uint8)))


def test_background_policy_table():
    navy = BackgroundColor(0, 0, 128)
    assert resolve_background(navy, ConversionMode.SINGLE) == navy
    assert resolve_background(navy, ConversionMode.BATCH) == navy
    assert resolve_background(None, ConversionMode.BATCH) == WHITE
    with pytest.raises(MissingBackgroundError, match="transparency"):
        resolve_background(None, ConversionMode.SINGLE)


def test_flatten_ignores_background_without_transparency():
    arr = np.full((2, 3, 4), 255, dtype=np.uint8)
    arr[:, :, 1] = 40
    out = flatten_for_target(PixelBuffer.from_array(arr), BackgroundColor(0, 0, 0), ConversionMode.SINGLE)
    assert np.array_equal(out.pixels, arr[:, :, :3])


def test_flatten_passes_rgb_through():
    buf = PixelBuffer.from_array(np.zeros((2, 2, 3), dtype=np.uint8))
    assert flatten_for_target(buf, None, ConversionMode.SINGLE) is buf


def test_flatten_transparent_single_without_background_fails():
    buf = PixelBuffer.from_array(transparent_rgba())
    with pytest.raises(MissingBackgroundError):
        flatten_for_target(buf, None, ConversionMode.SINGLE)


def test_flatten_transparent_batch_defaults_to_white():
    buf = PixelBuffer.from_array(transparent_rgba())
    out = flatten_for_target(buf, None, ConversionMode.BATCH)
    assert out.channels == 3
    assert out.pixels[0, 0].tolist() == [255, 255, 255]
    assert out.pixels[0, 2].tolist() == [255, 0, 0]


def test_has_alpha_reflects_channel_count():
    assert PixelBuffer.from_array(transparent_rgba()).has_alpha
    assert not PixelBuffer.from_array(np.zeros((1, 1, 3), dtype=np.uint8)).has_alpha
