"""
Gateway: serves the image relay API and the static frontend.
This is the long-running entrypoint; backend/functions/api.py wraps the
same app for serverless hosting.
"""

from flask import Flask, jsonify, request, send_from_directory
from flask_cors import CORS
from werkzeug.exceptions import MethodNotAllowed, NotFound, RequestEntityTooLarge
import os
import logging
from typing import Optional

from backend.image_service.config import Settings, load_settings
from backend.image_service.gemini_client import GeminiImageClient
from backend.image_service.relay import RelayDependencies
from backend.image_service.routes import EXTENSION_KEY, image_bp
from backend.image_service.storage import DiskImageStorage, InlineImageStorage

logger = logging.getLogger(__name__)


def build_storage(settings: Settings):
    """
    Pick the output strategy for OUTPUT_MODE.
    Disk mode creates the output directory up front.
    """
    if settings.output_mode == "inline":
        return InlineImageStorage()
    return DiskImageStorage(settings.output_dir, url_prefix=settings.output_dir_name)


def create_app(settings: Optional[Settings] = None, client=None, storage=None) -> Flask:
    """
    Application factory for creating the Flask app.

    Args:
        settings (Settings, optional): Configuration. Loaded from the environment if omitted.
        client (optional): Generation client. Defaults to GeminiImageClient.
        storage (optional): Output storage. Defaults to the one OUTPUT_MODE selects.

    Returns:
        Flask: The configured Flask application.

    Raises:
        StartupConfigurationError: If GEMINI_API_KEY is missing or the settings are invalid.
    """
    settings = settings or load_settings()

    app = Flask(__name__, static_folder=None)
    app.config["MAX_CONTENT_LENGTH"] = settings.max_request_mb * 1024 * 1024
    app.config["RELAY_SETTINGS"] = settings

    CORS(app, resources={r"/api/*": {"origins": settings.cors_origins}})

    if client is None:
        client = GeminiImageClient(api_key=settings.gemini_api_key, model=settings.gemini_model)
    if storage is None:
        storage = build_storage(settings)

    app.extensions[EXTENSION_KEY] = RelayDependencies(
        client=client,
        storage=storage,
        include_upstream_text=settings.include_upstream_text,
    )

    # --- REGISTER BLUEPRINTS ---
    app.register_blueprint(image_bp, url_prefix="/api")
    logger.info(f"Image relay ready (model={settings.gemini_model}, output_mode={settings.output_mode})")

    @app.errorhandler(RequestEntityTooLarge)
    def too_large(_e):
        return jsonify({"error": f"Request body exceeds {settings.max_request_mb} MB"}), 413

    @app.errorhandler(NotFound)
    @app.errorhandler(MethodNotAllowed)
    def api_http_error(e):
        # API clients always get a JSON error body; other paths keep Flask's pages
        if request.path.startswith("/api/"):
            return jsonify({"error": e.description}), e.code
        return e

    # --- STATIC FILES ---
    public_dir = settings.public_dir
    output_dir = settings.output_dir

    @app.route("/")
    def index():
        """
        Serve the frontend's index document.
        """
        return send_from_directory(public_dir, "index.html")

    @app.route(f"/{settings.output_dir_name}/<path:filename>")
    def output_file(filename):
        """
        Serve a previously generated image.
        """
        return send_from_directory(output_dir, filename)

    @app.route("/<path:path>")
    def static_file(path):
        """
        Serve files from the public directory, falling back to index.html
        for unknown paths when SPA_FALLBACK is on.
        """
        if os.path.isfile(os.path.join(public_dir, path)):
            return send_from_directory(public_dir, path)
        if settings.spa_fallback and request.method == "GET" and not path.startswith("api/"):
            return send_from_directory(public_dir, "index.html")
        return jsonify({"error": "Not found"}), 404

    return app


if __name__ == "__main__":
    # Basic console logging during API requests
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(asctime)s - %(message)s")
    app = create_app()
    port = app.config["RELAY_SETTINGS"].port
    app.run(host="0.0.0.0", port=port, debug=os.getenv("FLASK_DEBUG") == "1")
