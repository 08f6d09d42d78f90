"""Shared pytest fixtures: fake Gemini client, clean session store, test images."""
import os
import tempfile
from io import BytesIO

# Settings are read at import time, so they must be in place before app modules load
os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="fusion-logs-")

import pytest
from fastapi.testclient import TestClient
from google.genai import types
from PIL import Image

from common.models import EncodedImage
from database.db import db
from image import references
from image.client import ai_service


def make_png(color=(200, 30, 30), size=(4, 4)) -> bytes:
    buf = BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


def image_response(*parts) -> types.GenerateContentResponse:
    """Build a one-candidate response from the given parts."""
    return types.GenerateContentResponse(
        candidates=[types.Candidate(content=types.Content(role="model", parts=list(parts)))]
    )


def inline_image_part(data: bytes, mime_type: str = "image/png") -> types.Part:
    return types.Part(inline_data=types.Blob(mime_type=mime_type, data=data))


class FakeModels:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []
        self.on_call = None

    def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.on_call:
            self.on_call()
        if self.error:
            raise self.error
        return self.response


class FakeGenaiClient:
    """Stands in for genai.Client; records every generate_content call."""

    def __init__(self, response=None, error=None):
        self.models = FakeModels(response=response, error=error)

    @property
    def calls(self):
        return self.models.calls

    def sent_parts(self, index: int = -1):
        return self.models.calls[index]["contents"][0].parts


RESULT_BYTES = make_png((10, 200, 10))


@pytest.fixture(autouse=True)
def clean_state():
    db.clear()
    yield
    db.clear()
    ai_service.client = None
    ai_service.init_error = None


@pytest.fixture
def fake_client():
    return FakeGenaiClient(response=image_response(
        types.Part.from_text(text="Here is your image."),
        inline_image_part(RESULT_BYTES),
    ))


@pytest.fixture
def ai(fake_client):
    assert ai_service.initialize(lambda: fake_client)
    return ai_service


@pytest.fixture
def broken_ai():
    def factory():
        raise ValueError("Missing key inputs argument!")
    assert not ai_service.initialize(factory)
    return ai_service


@pytest.fixture
def reference_fetches(monkeypatch):
    """Replace network fetches of gallery images; returns the list of fetched URLs."""
    fetched = []

    def fake_fetch(url):
        fetched.append(url)
        return EncodedImage.from_bytes(b"reference-bytes", "image/png")

    monkeypatch.setattr(references, "fetch_reference_image", fake_fetch)
    return fetched


@pytest.fixture
def subject_png():
    return make_png()


@pytest.fixture
def client():
    from app import app
    return TestClient(app)
