"""
Image acquisition: turns an uploaded file or the bundled default photo
into a data URL ("data:image/png;base64,...") used both for the on-page
preview and for the AI request.
"""
import io
import os
import base64

from PIL import Image, UnidentifiedImageError

from errors import ValidationError, ImageReadError

MAX_IMAGE_BYTES = 20 * 1024 * 1024  # 20 MB

MIME_BY_EXT = {
    "jpg":  "image/jpeg",
    "jpeg": "image/jpeg",
    "png":  "image/png",
    "webp": "image/webp",
    "bmp":  "image/bmp",
}

INVALID_TYPE_MESSAGE   = "Please upload a valid image file"
TOO_LARGE_MESSAGE      = "Image size should be less than 20MB"
NOT_AN_IMAGE_MESSAGE   = "The uploaded file does not appear to be a valid image."
READ_FAILED_MESSAGE    = "Failed to read the image file. Please try again."
DEFAULT_FAILED_MESSAGE = "Failed to load default image"


def to_data_url(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def split_data_url(data_url: str) -> tuple[str, bytes]:
    """Return (mime_type, raw_bytes) of a base64 data URL.

    Raises ValueError for anything that is not a non-empty base64 data URL.
    """
    if not data_url or not data_url.startswith("data:"):
        raise ValueError("not a data URL")
    header, sep, payload = data_url[5:].partition(",")
    if not sep or not header.endswith(";base64"):
        raise ValueError("data URL is not base64-encoded")
    mime_type = header[: -len(";base64")] or "application/octet-stream"
    data = base64.b64decode(payload, validate=True)
    if not data:
        raise ValueError("data URL has an empty payload")
    return mime_type, data


def validate_upload(content_type: str | None, size: int) -> None:
    """Check the declared content type and size of an upload before reading it."""
    if not content_type or not content_type.startswith("image/"):
        raise ValidationError(INVALID_TYPE_MESSAGE)
    if size > MAX_IMAGE_BYTES:
        raise ValidationError(TOO_LARGE_MESSAGE)


def _verify_image(data: bytes) -> None:
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()  # raises on corrupt / non-image data
    except Image.DecompressionBombError:
        # Header parsed as an image; only the pixel count is over Pillow's limit
        return
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        raise ValidationError(NOT_AN_IMAGE_MESSAGE) from e


def _stream_size(stream) -> int:
    pos = stream.tell()
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(pos)
    return size


def read_upload(file) -> str:
    """Validate and read a werkzeug FileStorage, returning its data URL."""
    try:
        size = _stream_size(file.stream)
    except OSError as e:
        raise ImageReadError(READ_FAILED_MESSAGE) from e

    validate_upload(file.mimetype, size)

    try:
        data = file.stream.read()
    except OSError as e:
        raise ImageReadError(READ_FAILED_MESSAGE) from e

    if not data:
        raise ValidationError(NOT_AN_IMAGE_MESSAGE)
    _verify_image(data)
    return to_data_url(data, file.mimetype)


def load_default_image(path: str) -> str:
    """Read the bundled default photo and return its data URL."""
    ext = path.rsplit(".", 1)[-1].lower()
    mime_type = MIME_BY_EXT.get(ext, "image/jpeg")
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise ImageReadError(DEFAULT_FAILED_MESSAGE) from e
    if not data:
        raise ImageReadError(DEFAULT_FAILED_MESSAGE)
    return to_data_url(data, mime_type)
