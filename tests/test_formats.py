import pytest

from image_converter.errors import UnsupportedFormatError
from image_converter.image_engine.formats import TargetFormat


@pytest.mark.parametrize(
    "tag, fmt",
    [
        ("png", TargetFormat.PNG),
        ("jpg", TargetFormat.JPEG),
        ("jpeg", TargetFormat.JPEG),
        ("JPEG", TargetFormat.JPEG),
        (" webp ", TargetFormat.WEBP),
        (TargetFormat.PNG, TargetFormat.PNG),
    ],
)
def test_from_tag(tag, fmt):
    assert TargetFormat.from_tag(tag) is fmt


@pytest.mark.parametrize("tag", ["gif", "", "bmp", "jp g"])
def test_unknown_tag(tag):
    with pytest.raises(UnsupportedFormatError):
        TargetFormat.from_tag(tag)


def test_format_properties():
    assert TargetFormat.JPEG.extension == "jpg"
    assert TargetFormat.WEBP.mime_type == "image/webp"
    assert not TargetFormat.JPEG.supports_alpha
    assert TargetFormat.PNG.supports_alpha and TargetFormat.WEBP.supports_alpha
