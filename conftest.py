"""
Shared test fixtures.

Environment is pinned before any project module reads it, so a developer's
.env never leaks a real API key or file logging into the test run.
"""
import base64
import os

os.environ["GEMINI_API_KEY"] = ""
os.environ["GENERATION_BACKEND"] = "gemini"
os.environ["LOG_TO_FILE"] = "false"

import pytest
from google.genai import types

from hairstyle.handler import HairstyleTransformHandler
from hairstyle.services import GeminiImageStrategy, ImagenEditStrategy

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR" + b"\x01" * 16
PNG_B64 = base64.b64encode(PNG_BYTES).decode("utf-8")

GENERATED_BYTES = b"\x89PNG\r\n\x1a\n" + b"generated-hairstyle"
GENERATED_B64 = base64.b64encode(GENERATED_BYTES).decode("utf-8")

EXPECTED_CORS_HEADERS = {
    "content-type": "application/json",
    "access-control-allow-origin": "*",
    "access-control-allow-methods": "POST, OPTIONS",
    "access-control-allow-headers": "Content-Type",
}


class FakeModels:
    """Stands in for client.models, recording every call."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def _respond(self, method, kwargs):
        self.calls.append((method, kwargs))
        if self.error is not None:
            raise self.error
        return self.response

    def generate_content(self, **kwargs):
        return self._respond("generate_content", kwargs)

    def edit_image(self, **kwargs):
        return self._respond("edit_image", kwargs)


class FakeClient:
    def __init__(self, response=None, error=None):
        self.models = FakeModels(response=response, error=error)


def image_content_response(data=GENERATED_BYTES, mime_type="image/png", text=None):
    """GenerateContentResponse with an optional leading text part and one inline image."""
    parts = []
    if text:
        parts.append(types.Part(text=text))
    parts.append(types.Part(inline_data=types.Blob(mime_type=mime_type, data=data)))
    return types.GenerateContentResponse(
        candidates=[types.Candidate(content=types.Content(role="model", parts=parts))]
    )


def text_only_response(text="I can't edit this photo."):
    return types.GenerateContentResponse(
        candidates=[types.Candidate(content=types.Content(role="model", parts=[types.Part(text=text)]))]
    )


def edit_image_response(data=GENERATED_BYTES):
    return types.EditImageResponse(
        generated_images=[types.GeneratedImage(image=types.Image(image_bytes=data, mime_type="image/png"))]
    )


@pytest.fixture
def make_handler():
    """Factory: handler around a Gemini strategy backed by a FakeClient."""
    def _make(response=None, error=None, api_key="test-key"):
        client = FakeClient(response=response, error=error)
        strategy = GeminiImageStrategy(client, "gemini-test-model")
        return HairstyleTransformHandler(api_key=api_key, strategy=strategy), client
    return _make


@pytest.fixture
def make_imagen_handler():
    def _make(response=None, error=None):
        client = FakeClient(response=response, error=error)
        strategy = ImagenEditStrategy(client, "imagen-test-model")
        return HairstyleTransformHandler(api_key="test-key", strategy=strategy), client
    return _make
