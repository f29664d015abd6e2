"""
Core generate handler: validate -> parse -> invoke -> filter -> materialize.

The handler has no module state. The generation client and the storage
strategy are passed in through RelayDependencies, so each deployment
adapter (and each test) decides what backs them.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Protocol

from backend.image_service.errors import GenerationFailed, InvalidRequest, StorageFailure, UpstreamFailure
from backend.image_service.images import GeneratedImage, ParsedImage, is_image_mime, parse_data_url_or_raw

logger = logging.getLogger(__name__)


class GenerationClient(Protocol):
    def generate(self, prompt: str, image: ParsedImage) -> Any: ...


class ImageStorage(Protocol):
    def save(self, image: GeneratedImage) -> str: ...

    def discard(self, ref: str) -> None: ...


@dataclass
class GenerationRequest:
    image_data: Any
    prompt: Any


@dataclass
class GenerationResult:
    image_url: str
    images: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"imageUrl": self.image_url, "images": list(self.images)}


@dataclass
class RelayDependencies:
    client: GenerationClient
    storage: ImageStorage
    include_upstream_text: bool = True


def _is_present(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def handle_generation(request: GenerationRequest, deps: RelayDependencies) -> GenerationResult:
    """
    Run one generation request end to end.

    Args:
        request (GenerationRequest): Image (data URL or raw base64) and prompt.
        deps (RelayDependencies): Generation client and output storage.

    Returns:
        GenerationResult: The last generated image reference plus all of them in order.

    Raises:
        InvalidRequest: Image or prompt missing or empty. The client is not called.
        UpstreamFailure: The generation client raised.
        GenerationFailed: The client returned no image parts.
        StorageFailure: Saving an image failed. Images saved earlier in this call are discarded.
    """
    if not _is_present(request.image_data) or not _is_present(request.prompt):
        raise InvalidRequest("Missing image or prompt")

    parsed = parse_data_url_or_raw(request.image_data)

    try:
        response = deps.client.generate(request.prompt, parsed)
    except Exception as e:
        logger.error(f"Generation service error: {e}")
        raise UpstreamFailure(str(e) or "Error generating image") from e

    images = [i for i in (getattr(response, "images", None) or []) if is_image_mime(i.mime_type)]
    if not images:
        text = (getattr(response, "text", "") or "").strip()
        message = "No image was generated"
        if deps.include_upstream_text and text:
            message = f"{message}. Model response: {text}"
        raise GenerationFailed(message, upstream_text=text or None)

    saved: List[str] = []
    try:
        for image in images:
            saved.append(deps.storage.save(image))
    except Exception as e:
        for ref in saved:
            deps.storage.discard(ref)
        if isinstance(e, StorageFailure):
            raise
        raise StorageFailure(f"Failed to save generated image: {e}") from e

    return GenerationResult(image_url=saved[-1], images=saved)
