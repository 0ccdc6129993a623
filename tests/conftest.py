from __future__ import annotations

import io
import sys
from pathlib import Path

import pytest
from PIL import Image

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from plantid.utils.image_encoder import UploadedImage  # noqa: E402


def _image_bytes(fmt: str) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (8, 6), color=(34, 139, 34)).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    return _image_bytes("PNG")


@pytest.fixture
def jpeg_bytes() -> bytes:
    return _image_bytes("JPEG")


@pytest.fixture
def plant_image(jpeg_bytes) -> UploadedImage:
    return UploadedImage(content=jpeg_bytes, mime_type="image/jpeg", size=len(jpeg_bytes), name="monstera.jpg")
