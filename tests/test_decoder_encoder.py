import io
import os

import numpy as np
import pytest
from PIL import Image

pytest.importorskip("pyvips")

from conftest import transparent_rgba
from image_converter.errors import ConversionIOError, DecodeError
from image_converter.image_engine import TargetFormat, decode_bytes, decode_file, encode
from image_converter.image_engine.pixel_buffer import PixelBuffer


def _png_bytes(arr: np.ndarray) -> bytes:
    out = io.BytesIO()
    Image.fromarray(arr).save(out, format="PNG")
    return out.getvalue()


def test_decode_bytes_keeps_alpha():
    arr = transparent_rgba()
    buf = decode_bytes(_png_bytes(arr))
    assert (buf.width, buf.height, buf.channels) == (6, 4, 4)
    assert np.array_equal(buf.pixels, arr)
    assert len(buf.to_bytes()) == buf.width * buf.height * buf.channels


def test_decode_grey_expands_to_rgb():
    grey = np.arange(12, dtype=np.uint8).reshape(3, 4) * 20
    buf = decode_bytes(_png_bytes(grey))
    assert buf.channels == 3
    assert np.array_equal(buf.pixels[:, :, 0], grey)
    assert np.array_equal(buf.pixels[:, :, 2], grey)


def test_decode_file_sniffs_content_not_extension(tmp_path, write_image):
    arr = np.full((5, 7, 3), 90, dtype=np.uint8)
    path = write_image(tmp_path / "actually_png.jpg", arr, fmt="PNG")
    buf = decode_file(path)
    assert np.array_equal(buf.pixels, arr)


@pytest.mark.parametrize("data", [b"", b"not an image at all", b"\x89PNG\r\n\x1a\n" + b"\x00" * 8])
def test_decode_bytes_rejects_garbage(data):
    with pytest.raises(DecodeError):
        decode_bytes(data)


def test_decode_file_missing_is_io_error(tmp_path):
    with pytest.raises(ConversionIOError, match="no such file"):
        decode_file(tmp_path / "nope.png")


@pytest.mark.skipif(not hasattr(os, "geteuid") or os.geteuid() == 0, reason="root ignores file permissions")
def test_decode_file_unreadable_is_io_error(tmp_path, write_image):
    path = write_image(tmp_path / "locked.png", np.zeros((2, 2, 3), dtype=np.uint8))
    path.chmod(0)
    try:
        with pytest.raises(ConversionIOError, match="permission denied"):
            decode_file(path)
    finally:
        path.chmod(0o644)


def test_decode_file_corrupt_content_is_decode_error(tmp_path):
    path = tmp_path / "broken.png"
    path.write_bytes(b"not an image at all")
    with pytest.raises(DecodeError):
        decode_file(path)


@pytest.mark.parametrize("channels", [3, 4])
def test_png_roundtrip_is_lossless(channels):
    rng = np.random.default_rng(channels)
    arr = rng.integers(0, 256, size=(13, 17, channels), dtype=np.uint8)
    buf = PixelBuffer.from_array(arr)
    data = encode(buf, TargetFormat.PNG)
    assert data.startswith(b"\x89PNG\r\n\x1a\n")
    back = decode_bytes(data)
    assert back.channels == channels
    assert np.array_equal(back.pixels, arr)


def test_jpeg_needs_rgb():
    buf = PixelBuffer.from_array(transparent_rgba())
    with pytest.raises(ValueError):
        encode(buf, TargetFormat.JPEG)


def test_jpeg_output_is_jpeg():
    buf = PixelBuffer.from_array(np.full((8, 8, 3), 200, dtype=np.uint8))
    data = encode(buf, TargetFormat.JPEG)
    assert data[:2] == b"\xff\xd8"
    with Image.open(io.BytesIO(data)) as img:
        assert img.format == "JPEG"
        assert img.size == (8, 8)


def test_webp_keeps_transparency():
    buf = PixelBuffer.from_array(transparent_rgba(16, 16))
    data = encode(buf, TargetFormat.WEBP)
    assert data[:4] == b"RIFF" and data[8:12] == b"WEBP"
    back = decode_bytes(data)
    assert back.channels == 4
    assert back.pixels[0, 0, 3] == 0


def test_webp_from_rgb():
    buf = PixelBuffer.from_array(np.full((4, 4, 3), 30, dtype=np.uint8))
    data = encode(buf, TargetFormat.WEBP)
    assert data[8:12] == b"WEBP"
