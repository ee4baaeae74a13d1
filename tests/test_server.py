"""
Tests for the conversion API.
"""

import pytest
from fastapi.testclient import TestClient

from conftest import FakeChatModel
from screen2code.config import Settings
from screen2code.pipeline.generation import ScreenshotConverter
from screen2code.server.app import create_app, get_converter


def make_client(llm, api_key="test-key", **settings_kwargs):
    settings = Settings(gemini_api_key=api_key, **settings_kwargs)
    app = create_app(settings)
    app.dependency_overrides[get_converter] = lambda: ScreenshotConverter(settings=settings, llm=llm)
    return TestClient(app)


def test_convert_returns_unfenced_html(png_bytes):
    llm = FakeChatModel(content="```html\n<!DOCTYPE html>...\n```")
    client = make_client(llm)

    # Pad to roughly 10KB, the server does not decode the image
    payload = png_bytes + b"\0" * (10 * 1024 - len(png_bytes))
    response = client.post("/api/convert", files={"image": ("shot.png", payload, "image/png")})

    assert response.status_code == 200
    assert response.json() == {"html": "<!DOCTYPE html>..."}
    assert len(llm.calls) == 1


def test_gif_is_rejected(gif_bytes):
    llm = FakeChatModel()
    client = make_client(llm)

    response = client.post("/api/convert", files={"image": ("anim.gif", gif_bytes, "image/gif")})

    assert response.status_code == 400
    assert response.json() == {"error": "Only PNG, JPEG, and WebP images are allowed"}
    assert llm.calls == []


@pytest.mark.parametrize("media_type", ["image/png", "image/jpeg", "image/jpg", "image/webp"])
def test_allowed_media_types_are_accepted(png_bytes, media_type):
    client = make_client(FakeChatModel())

    response = client.post("/api/convert", files={"image": ("shot", png_bytes, media_type)})
    assert response.status_code == 200


def test_missing_credential(png_bytes):
    llm = FakeChatModel()
    client = make_client(llm, api_key="")

    response = client.post("/api/convert", files={"image": ("shot.png", png_bytes, "image/png")})

    assert response.status_code == 500
    assert response.json()["error"].startswith("Gemini API key not configured")
    assert "GEMINI_API_KEY" in response.json()["error"]
    assert llm.calls == []


def test_no_image_uploaded():
    llm = FakeChatModel()
    client = make_client(llm)

    response = client.post("/api/convert", files={"file": ("shot.png", b"data", "image/png")})

    assert response.status_code == 400
    assert response.json() == {"error": "No image uploaded"}
    assert llm.calls == []


def test_oversized_upload_is_rejected():
    llm = FakeChatModel()
    client = make_client(llm, max_upload_bytes=1024)

    response = client.post("/api/convert", files={"image": ("big.png", b"\0" * 2048, "image/png")})

    assert response.status_code == 413
    assert response.json() == {"error": "Image exceeds the 1 KB upload limit"}
    assert llm.calls == []


def test_oversized_content_length_is_rejected_before_parsing():
    llm = FakeChatModel()
    client = make_client(llm, max_upload_bytes=1024)

    # Not a valid multipart body: only the declared length is looked at
    response = client.post(
        "/api/convert",
        content=b"x" * (200 * 1024),
        headers={"content-type": "multipart/form-data; boundary=zzz"},
    )

    assert response.status_code == 413
    assert response.json() == {"error": "Image exceeds the 1 KB upload limit"}
    assert llm.calls == []


def test_content_length_guard_only_applies_to_convert():
    client = make_client(FakeChatModel(), max_upload_bytes=1024)

    response = client.post("/api/health", content=b"x" * (200 * 1024))

    assert response.status_code == 405


def test_default_limit_rejects_one_byte_over():
    llm = FakeChatModel()
    client = make_client(llm)

    payload = b"\0" * (5 * 1024 * 1024 + 1)
    response = client.post("/api/convert", files={"image": ("big.png", payload, "image/png")})

    assert response.status_code == 413
    assert llm.calls == []


def test_api_failure_message_is_passed_through(png_bytes):
    client = make_client(FakeChatModel(error=RuntimeError("API quota exceeded")))

    response = client.post("/api/convert", files={"image": ("shot.png", png_bytes, "image/png")})

    assert response.status_code == 500
    assert response.json() == {"error": "API quota exceeded"}


def test_api_failure_without_message(png_bytes):
    client = make_client(FakeChatModel(error=ConnectionError()))

    response = client.post("/api/convert", files={"image": ("shot.png", png_bytes, "image/png")})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to convert image"}


def test_unexpected_error_is_reported(png_bytes):
    settings = Settings(gemini_api_key="test-key")
    app = create_app(settings)

    class BrokenConverter:
        def convert(self, upload, request_id=None):
            raise KeyError("boom")

    app.dependency_overrides[get_converter] = lambda: BrokenConverter()
    client = TestClient(app)

    response = client.post("/api/convert", files={"image": ("shot.png", png_bytes, "image/png")})

    assert response.status_code == 500
    assert "error" in response.json()


def test_error_outside_handler_uses_error_shape(png_bytes):
    app = create_app(Settings(gemini_api_key="test-key"))

    def broken_converter():
        raise RuntimeError("boom")

    app.dependency_overrides[get_converter] = broken_converter
    client = TestClient(app, raise_server_exceptions=False)

    response = client.post("/api/convert", files={"image": ("shot.png", png_bytes, "image/png")})

    assert response.status_code == 500
    assert response.json() == {"error": "boom"}


def test_error_without_message_gets_default(png_bytes):
    app = create_app(Settings(gemini_api_key="test-key"))

    def broken_converter():
        raise RuntimeError()

    app.dependency_overrides[get_converter] = broken_converter
    client = TestClient(app, raise_server_exceptions=False)

    response = client.post("/api/convert", files={"image": ("shot.png", png_bytes, "image/png")})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to convert image"}


def test_unknown_route_uses_error_shape():
    client = make_client(FakeChatModel())

    response = client.get("/api/nope")

    assert response.status_code == 404
    assert "error" in response.json()


def test_health():
    client = make_client(FakeChatModel(), api_key="")

    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "model": "gemini-2.5-flash", "configured": False}


def test_cors_headers(png_bytes):
    client = make_client(FakeChatModel())

    response = client.post(
        "/api/convert",
        headers={"Origin": "http://localhost:5173"},
        files={"image": ("shot.png", png_bytes, "image/png")},
    )

    assert response.headers["access-control-allow-origin"] == "*"
