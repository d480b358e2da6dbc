"""Tests for reading uploads and the default image into data URLs"""

import base64
import io

import pytest
from PIL import Image
from werkzeug.datastructures import FileStorage

from conftest import huge_png_header, make_image_bytes, make_upload
from errors import ImageReadError, ValidationError
from image_acquisition import (
    MAX_IMAGE_BYTES,
    load_default_image,
    read_upload,
    split_data_url,
    to_data_url,
    validate_upload,
)
from stone_content import DEFAULT_IMAGE


class BrokenStream(io.BytesIO):
    def read(self, *args):
        raise OSError("disk went away")


class TestValidateUpload:

    def test_accepts_image_within_limit(self):
        validate_upload("image/png", MAX_IMAGE_BYTES)

    @pytest.mark.parametrize("content_type", [None, "", "text/plain", "application/pdf"])
    def test_rejects_non_image_types(self, content_type):
        with pytest.raises(ValidationError, match="valid image file"):
            validate_upload(content_type, 10)

    def test_rejects_oversized(self):
        with pytest.raises(ValidationError, match="less than 20MB"):
            validate_upload("image/jpeg", MAX_IMAGE_BYTES + 1)


class TestReadUpload:

    def test_jpeg_becomes_data_url(self, jpeg_bytes):
        data_url = read_upload(make_upload(jpeg_bytes))
        assert data_url.startswith("data:image/jpeg;base64,")
        assert split_data_url(data_url) == ("image/jpeg", jpeg_bytes)

    def test_png_keeps_declared_type(self, png_bytes):
        data_url = read_upload(make_upload(png_bytes, "stone.png", "image/png"))
        assert data_url.startswith("data:image/png;base64,")

    def test_photo_sized_image(self):
        data = make_image_bytes("JPEG", size=(4000, 3000))
        assert read_upload(make_upload(data)).startswith("data:image/jpeg;base64,")

    def test_exactly_20mb_is_accepted(self, jpeg_bytes):
        data = jpeg_bytes + b"\0" * (MAX_IMAGE_BYTES - len(jpeg_bytes))
        assert len(data) == MAX_IMAGE_BYTES
        data_url = read_upload(make_upload(data))
        assert split_data_url(data_url)[1] == data

    def test_more_pixels_than_pillow_allows(self):
        data = huge_png_header(20000, 20000)
        data_url = read_upload(make_upload(data, "wide.png", "image/png"))
        assert data_url.startswith("data:image/png;base64,")

    def test_type_is_checked_before_content(self, jpeg_bytes):
        with pytest.raises(ValidationError, match="valid image file"):
            read_upload(make_upload(jpeg_bytes, "stone.txt", "text/plain"))

    def test_25mb_file_is_rejected(self):
        data = b"\xff\xd8" + b"\0" * (25 * 1024 * 1024)
        with pytest.raises(ValidationError, match="less than 20MB"):
            read_upload(make_upload(data))

    def test_corrupt_image_is_rejected(self):
        with pytest.raises(ValidationError, match="does not appear to be a valid image"):
            read_upload(make_upload(b"definitely not a jpeg"))

    def test_empty_file_is_rejected(self):
        with pytest.raises(ValidationError):
            read_upload(make_upload(b""))

    def test_read_failure(self):
        upload = FileStorage(stream=BrokenStream(b"xx"), filename="s.jpg", content_type="image/jpeg")
        with pytest.raises(ImageReadError, match="Failed to read the image file"):
            read_upload(upload)

    def test_read_failure_is_an_oserror(self):
        upload = FileStorage(stream=BrokenStream(b"xx"), filename="s.jpg", content_type="image/jpeg")
        with pytest.raises(OSError):
            read_upload(upload)


class TestDefaultImage:

    def test_bundled_image_loads(self):
        data_url = load_default_image(DEFAULT_IMAGE)
        assert data_url.startswith("data:image/bmp;base64,")
        assert len(data_url) > len("data:image/bmp;base64,")

    def test_bundled_image_is_a_picture(self):
        with Image.open(DEFAULT_IMAGE) as img:
            assert img.size == (320, 240)
            lo, hi = img.convert("L").getextrema()
        assert hi - lo > 100

    def test_mime_type_follows_extension(self, tmp_path, jpeg_bytes):
        path = tmp_path / "stone.JPG"
        path.write_bytes(jpeg_bytes)
        assert load_default_image(str(path)).startswith("data:image/jpeg;base64,")

    def test_missing_file(self, tmp_path):
        with pytest.raises(ImageReadError, match="Failed to load default image"):
            load_default_image(str(tmp_path / "missing.png"))

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.png"
        path.write_bytes(b"")
        with pytest.raises(ImageReadError):
            load_default_image(str(path))


class TestDataUrl:

    def test_to_data_url(self):
        assert to_data_url(b"abc", "image/png") == "data:image/png;base64," + base64.b64encode(b"abc").decode()

    @pytest.mark.parametrize("value", [
        "",
        "image/png;base64,AAAA",
        "data:image/png,AAAA",
        "data:image/png;base64",
        "data:image/png;base64,",
        "data:image/png;base64,@@@",
    ])
    def test_split_rejects_malformed(self, value):
        with pytest.raises(ValueError):
            split_data_url(value)
