"""
Gemini client used as the generation capability.

Sends one prompt plus one inline image and asks for image and text
output. The response is reduced to the image parts (in order) and any
explanatory text the model returned.
"""

import base64
import logging
from dataclasses import dataclass, field
from typing import List

from google import genai
from google.genai import types

from backend.image_service.images import GeneratedImage, ParsedImage, is_image_mime

logger = logging.getLogger(__name__)

RESPONSE_MODALITIES = ["IMAGE", "TEXT"]


@dataclass
class GenerationResponse:
    images: List[GeneratedImage] = field(default_factory=list)
    text: str = ""


def _payload_as_base64(data) -> str:
    # The SDK hands back decoded bytes; older payloads may already be base64 text.
    if isinstance(data, (bytes, bytearray)):
        return base64.b64encode(bytes(data)).decode("ascii")
    return str(data)


def extract_response(response) -> GenerationResponse:
    """
    Pull image and text parts out of the first candidate.

    Args:
        response: A google.genai GenerateContentResponse (or anything shaped like one).

    Returns:
        GenerationResponse: Image parts in response order and the joined text parts.
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates or candidates[0].content is None:
        return GenerationResponse()

    images: List[GeneratedImage] = []
    texts: List[str] = []
    for part in candidates[0].content.parts or []:
        inline = getattr(part, "inline_data", None)
        if inline is not None and inline.data and is_image_mime(inline.mime_type):
            images.append(GeneratedImage(
                mime_type=inline.mime_type,
                base64_payload=_payload_as_base64(inline.data),
            ))
        elif getattr(part, "text", None):
            texts.append(part.text)

    return GenerationResponse(images=images, text="\n".join(texts).strip())


class GeminiImageClient:
    """Thin wrapper around google.genai.Client for image-to-image generation."""

    def __init__(self, api_key: str, model: str, client=None):
        self.model = model
        self._client = client or genai.Client(api_key=api_key)

    def generate(self, prompt: str, image: ParsedImage) -> GenerationResponse:
        contents = [
            types.Part.from_text(text=prompt),
            types.Part.from_bytes(
                data=base64.b64decode(image.base64_payload),
                mime_type=image.mime_type,
            ),
        ]

        logger.info("Requesting generation from %s (input %s)", self.model, image.mime_type)
        response = self._client.models.generate_content(
            model=self.model,
            contents=contents,
            config=types.GenerateContentConfig(response_modalities=RESPONSE_MODALITIES),
        )
        result = extract_response(response)
        logger.info("Generation returned %d image part(s)", len(result.images))
        return result
