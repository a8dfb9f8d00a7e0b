"""
Shared fixtures: in-memory PNGs and a scriptable fake editor.
"""

from io import BytesIO
import threading

import pytest
from PIL import Image

from pixshop.adapters import BaseImageEditor, GeneratedImage
from pixshop.editing import HandleRegistry


def make_png(width: int, height: int, color=(200, 30, 30)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


def make_gradient_png(width: int, height: int) -> bytes:
    """Each pixel encodes its own coordinates: (x % 256, y % 256, 0)."""
    image = Image.new("RGB", (width, height))
    image.putdata([(x % 256, y % 256, 0) for y in range(height) for x in range(width)])
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


class FakeEditor(BaseImageEditor):
    """Records prompts and returns canned images; can block on a gate."""

    def __init__(self, result: bytes = None, error: Exception = None):
        super().__init__("fake-editor")
        self.result = result or make_png(8, 8, (0, 0, 255))
        self.error = error
        self.gate = None
        self.prompts = []
        self.sources = []
        self.chat_reply = "Try a warmer filter."
        self.chat_error = None
        self.chat_messages = []

    def edit(self, image_data, mime_type, prompt):
        self.prompts.append(prompt)
        self.sources.append(image_data)
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.error is not None:
            raise self.error
        return GeneratedImage(data=self.result, mime_type="image/png")

    def chat(self, message):
        self.chat_messages.append(message)
        if self.chat_error is not None:
            raise self.chat_error
        return self.chat_reply

    def hold(self) -> threading.Event:
        """Make the next edit block until the returned event is set."""
        self.gate = threading.Event()
        return self.gate


@pytest.fixture
def png():
    return make_png


@pytest.fixture
def gradient_png():
    return make_gradient_png


@pytest.fixture
def editor():
    return FakeEditor()


@pytest.fixture
def registry():
    return HandleRegistry()
