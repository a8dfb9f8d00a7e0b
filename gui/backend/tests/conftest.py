"""
Backend test fixtures: a TestClient bound to a Studio with a fake editor.
"""

from io import BytesIO
from pathlib import Path
import base64
import sys

import pytest
from PIL import Image

BACKEND_DIR = Path(__file__).parent.parent
PROJECT_ROOT = BACKEND_DIR.parent.parent
for path in (PROJECT_ROOT, BACKEND_DIR):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from fastapi.testclient import TestClient

from pixshop import Studio
from pixshop.adapters import BaseImageEditor, GeneratedImage


def make_png(width: int, height: int, color=(10, 120, 200)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


def to_data_url(data: bytes, mime_type: str = "image/png") -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


class StubEditor(BaseImageEditor):
    """Returns a fixed image, or raises `error` when set."""

    def __init__(self):
        super().__init__("stub-editor")
        self.result = make_png(16, 16, (255, 255, 0))
        self.error = None

    def edit(self, image_data, mime_type, prompt):
        if self.error is not None:
            raise self.error
        return GeneratedImage(data=self.result)

    def chat(self, message):
        return f"You said: {message}"


@pytest.fixture
def editor():
    return StubEditor()


@pytest.fixture
def client(editor):
    from main import app
    from services.session_service import set_studio

    set_studio(Studio(editor))
    yield TestClient(app)
    set_studio(None)


@pytest.fixture
def source_png():
    return make_png(100, 200)


@pytest.fixture
def uploaded(client, source_png):
    """Client with a 100x200 image already loaded."""
    response = client.post(
        "/api/session/upload",
        json={"filename": "photo.png", "data_url": to_data_url(source_png)},
    )
    assert response.status_code == 200
    return client
