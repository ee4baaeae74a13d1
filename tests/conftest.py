"""
Shared fixtures: sample screenshots and a fake chat model.
"""

import os
from io import BytesIO

# Keep tests offline and quiet regardless of the developer's .env
os.environ["GEMINI_API_KEY"] = ""
os.environ["LLM_DEBUG_LEVEL"] = "NONE"
os.environ["LLM_LOG_TO_FILE"] = "false"

import pytest
from langchain_core.messages import AIMessage
from PIL import Image

from screen2code.models import ImageUpload


class FakeChatModel:
    """Stands in for ChatGoogleGenerativeAI and records every call."""

    def __init__(self, content="<!DOCTYPE html><html></html>", error=None, usage=None):
        self.content = content
        self.error = error
        self.usage = usage
        self.calls = []

    def invoke(self, messages, **kwargs):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        if self.usage:
            return AIMessage(content=self.content, usage_metadata=self.usage)
        return AIMessage(content=self.content)


def make_image_bytes(format="PNG", size=(64, 48), color="white"):
    buffer = BytesIO()
    Image.new("RGB", size, color=color).save(buffer, format=format)
    return buffer.getvalue()


@pytest.fixture
def png_bytes():
    return make_image_bytes("PNG")


@pytest.fixture
def gif_bytes():
    return make_image_bytes("GIF")


@pytest.fixture
def png_upload(png_bytes):
    return ImageUpload(filename="screen.png", media_type="image/png", data=png_bytes)


@pytest.fixture
def fake_llm():
    return FakeChatModel()
