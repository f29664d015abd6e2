import pytest

from backend.gateway.server import create_app
from backend.image_service.config import Settings
from backend.image_service.gemini_client import GenerationResponse
from backend.image_service.images import GeneratedImage, to_data_url
from backend.tests.fakes import FakeGenerationClient, MemoryImageStorage

PNG_B64 = "iVBORw0KGgo="
JPEG_B64 = "/9j/4AAQSkZJRg=="


@pytest.fixture
def png_image():
    return GeneratedImage(mime_type="image/png", base64_payload=PNG_B64)


@pytest.fixture
def jpeg_image():
    return GeneratedImage(mime_type="image/jpeg", base64_payload=JPEG_B64)


@pytest.fixture
def public_dir(tmp_path):
    public = tmp_path / "public"
    public.mkdir()
    (public / "index.html").write_text("<html>relay</html>")
    (public / "app.js").write_text("console.log('hi');")
    return public


@pytest.fixture
def settings(public_dir):
    return Settings(gemini_api_key="test-key", public_dir=str(public_dir))


@pytest.fixture
def fake_client(png_image, jpeg_image):
    return FakeGenerationClient(GenerationResponse(images=[png_image, jpeg_image], text="Here you go"))


@pytest.fixture
def memory_storage():
    return MemoryImageStorage()


@pytest.fixture
def app(settings, fake_client, memory_storage):
    app = create_app(settings, client=fake_client, storage=memory_storage)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def data_url():
    return to_data_url(GeneratedImage(mime_type="image/png", base64_payload=PNG_B64))
