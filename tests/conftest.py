"""
Pytest configuration for the stone identifier tests.

Keeps tests from writing last_error.log into the working directory and
never lets them reach the real AI service.
"""
import io
import struct
import zlib

import pytest
from PIL import Image
from unittest.mock import Mock
from werkzeug.datastructures import FileStorage

import app as app_module
import error_log
from page_controller import ControllerRegistry, PageController


@pytest.fixture(autouse=True)
def error_log_path(tmp_path, monkeypatch):
    path = tmp_path / "last_error.log"
    monkeypatch.setattr(error_log, "ERROR_LOG", str(path))
    return path


def make_image_bytes(fmt: str = "JPEG", size=(8, 8), color=(120, 110, 100)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


def huge_png_header(width: int, height: int) -> bytes:
    """A 1-bit greyscale PNG declaring the given size, with an empty pixel stream."""
    def chunk(kind: bytes, body: bytes) -> bytes:
        return struct.pack(">I", len(body)) + kind + body + struct.pack(">I", zlib.crc32(kind + body))

    ihdr = struct.pack(">IIBBBBB", width, height, 1, 0, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + chunk(b"IHDR", ihdr)
        + chunk(b"IDAT", zlib.compress(b""))
        + chunk(b"IEND", b"")
    )


def make_upload(data: bytes, filename: str = "stone.jpg", content_type: str = "image/jpeg") -> FileStorage:
    return FileStorage(stream=io.BytesIO(data), filename=filename, content_type=content_type)


@pytest.fixture
def jpeg_bytes():
    return make_image_bytes("JPEG")


@pytest.fixture
def png_bytes():
    return make_image_bytes("PNG")


@pytest.fixture
def fake_analyze():
    return Mock(return_value="1. Stone Identification:\n- Name: Quartz\n- Hardness: 7")


@pytest.fixture
def client(monkeypatch, fake_analyze):
    registry = ControllerRegistry(factory=lambda: PageController(analyze=fake_analyze))
    monkeypatch.setattr(app_module, "controllers", registry)
    app_module.app.config["TESTING"] = True
    with app_module.app.test_client() as c:
        yield c
