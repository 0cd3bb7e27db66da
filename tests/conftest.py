"""Shared fixtures: in-memory uploads for the file and image checks."""

import io

import pytest
from PIL import Image

from fieldcheck.http import UploadFile


def make_image(fmt: str, width: int, height: int) -> bytes:
    """Encode a blank RGB image of the given size in *fmt* (Pillow format name)."""
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color=(40, 90, 160)).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def image_bytes():
    """Factory fixture: ``image_bytes("PNG", 4, 4)`` returns encoded image data."""
    return make_image


@pytest.fixture
def png_upload() -> UploadFile:
    return UploadFile.from_bytes("photo.png", make_image("PNG", 200, 300), "image/png")


@pytest.fixture
def jpeg_upload() -> UploadFile:
    return UploadFile.from_bytes("photo.jpg", make_image("JPEG", 200, 300), "image/jpeg")


@pytest.fixture
def gif_upload() -> UploadFile:
    return UploadFile.from_bytes("anim.gif", make_image("GIF", 200, 300), "image/gif")


@pytest.fixture
def text_upload() -> UploadFile:
    return UploadFile.from_bytes("notes.txt", b"New text", "text/plain")
