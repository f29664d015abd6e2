import pytest

from backend.image_service.errors import StorageFailure
from backend.image_service.gemini_client import GenerationResponse
from backend.tests.fakes import FakeGenerationClient


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.get_json() == {"ok": True}


def test_health_ignores_upstream_state(app, client):
    app.extensions["image_relay"].client = FakeGenerationClient(error=RuntimeError("down"))

    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.get_json() == {"ok": True}


def test_generate_success(client, fake_client, data_url):
    response = client.post("/api/generate", json={"imageBase64": data_url, "prompt": "add a hat"})

    assert response.status_code == 200
    data = response.get_json()
    assert data["imageUrl"] == "/outputs/image-2"
    assert data["images"] == ["/outputs/image-1", "/outputs/image-2"]
    assert len(fake_client.calls) == 1


@pytest.mark.parametrize("payload", [
    {"prompt": "add a hat"},
    {"imageBase64": "AAAA"},
    {"imageBase64": "", "prompt": "add a hat"},
    {},
    [],
])
def test_generate_missing_fields(client, fake_client, payload):
    response = client.post("/api/generate", json=payload)

    assert response.status_code == 400
    assert response.get_json() == {"error": "Missing image or prompt"}
    assert fake_client.calls == []


def test_generate_non_json_body(client, fake_client):
    response = client.post("/api/generate", data="not json", content_type="text/plain")

    assert response.status_code == 400
    assert fake_client.calls == []


def test_generate_no_image(app, client):
    app.extensions["image_relay"].client = FakeGenerationClient(
        GenerationResponse(images=[], text="Sorry, I can only describe this image.")
    )

    response = client.post("/api/generate", json={"imageBase64": "AAAA", "prompt": "add a hat"})

    assert response.status_code == 500
    error = response.get_json()["error"]
    assert error.startswith("No image was generated")
    assert "Sorry, I can only describe this image." in error


def test_generate_upstream_error_passed_through(app, client):
    app.extensions["image_relay"].client = FakeGenerationClient(error=RuntimeError("API key not valid"))

    response = client.post("/api/generate", json={"imageBase64": "AAAA", "prompt": "add a hat"})

    assert response.status_code == 500
    assert response.get_json() == {"error": "API key not valid"}


def test_generate_storage_error(client, memory_storage, mocker):
    mocker.patch.object(memory_storage, "save", side_effect=StorageFailure("Failed to save generated image: read-only"))

    response = client.post("/api/generate", json={"imageBase64": "AAAA", "prompt": "add a hat"})

    assert response.status_code == 500
    assert response.get_json() == {"error": "Failed to save generated image: read-only"}


def test_generate_unexpected_error(client, mocker):
    mocker.patch("backend.image_service.routes.handle_generation", side_effect=ValueError("boom"))

    response = client.post("/api/generate", json={"imageBase64": "AAAA", "prompt": "add a hat"})

    assert response.status_code == 500
    assert response.get_json() == {"error": "boom"}


def test_generate_body_too_large(settings, fake_client, memory_storage):
    from dataclasses import replace
    from backend.gateway.server import create_app

    app = create_app(replace(settings, max_request_mb=1), client=fake_client, storage=memory_storage)
    client = app.test_client()

    payload = {"imageBase64": "A" * (1024 * 1024 + 10), "prompt": "add a hat"}
    response = client.post("/api/generate", json=payload)

    assert response.status_code == 413
    assert "error" in response.get_json()
    assert fake_client.calls == []


def test_cors_header_on_api(client):
    response = client.get("/api/health", headers={"Origin": "http://example.com"})
    assert response.headers.get("Access-Control-Allow-Origin") in ("*", "http://example.com")


def test_unmatched_api_post_returns_json(client):
    response = client.post("/api/nope", json={})

    assert response.status_code == 405
    assert response.is_json
    assert "error" in response.get_json()


def test_wrong_method_on_generate_returns_json(client):
    response = client.put("/api/generate", json={})

    assert response.status_code == 405
    assert "error" in response.get_json()
