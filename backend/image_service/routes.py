"""
Image relay route handlers.
Mounted under /api by the gateway and the serverless function.
"""

import logging
from typing import Tuple

from flask import Blueprint, current_app, jsonify, request, Response

from backend.image_service.errors import RelayError
from backend.image_service.relay import GenerationRequest, RelayDependencies, handle_generation

logger = logging.getLogger(__name__)

image_bp = Blueprint("image", __name__)

EXTENSION_KEY = "image_relay"


def get_dependencies() -> RelayDependencies:
    return current_app.extensions[EXTENSION_KEY]


@image_bp.route("/health", methods=["GET"])
def health() -> Tuple[Response, int]:
    """
    Liveness probe. Does not touch the generation service.
    """
    return jsonify({"ok": True}), 200


@image_bp.route("/generate", methods=["POST"])
def generate() -> Tuple[Response, int]:
    """
    Generate an image from an input image and a prompt.

    Expects:
    - imageBase64 (str): data URL or raw base64 image
    - prompt (str)

    Returns:
        200: {"imageUrl": str, "images": [str, ...]}
        400: Missing image or prompt.
        500: Generation, upstream or storage error.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}

    gen_request = GenerationRequest(
        image_data=data.get("imageBase64"),
        prompt=data.get("prompt"),
    )

    try:
        result = handle_generation(gen_request, get_dependencies())
    except RelayError as e:
        if e.status_code >= 500:
            logger.error(f"Error in /api/generate ({type(e).__name__}): {e.message}")
        return jsonify({"error": e.message}), e.status_code
    except Exception as e:
        logger.exception("Unexpected error in /api/generate")
        return jsonify({"error": str(e) or "Error generating image"}), 500

    return jsonify(result.to_dict()), 200

