"""
Output strategies for generated images.

DiskImageStorage writes each image under the public output directory and
returns the URL path it is served from. InlineImageStorage writes nothing
and returns a data URL instead.
"""

import base64
import binascii
import logging
import os
import uuid

from backend.image_service.errors import StorageFailure
from backend.image_service.images import GeneratedImage, ext_from_mime, to_data_url

logger = logging.getLogger(__name__)


class DiskImageStorage:
    def __init__(self, output_dir: str, url_prefix: str = "/outputs"):
        self.output_dir = output_dir
        self.url_prefix = "/" + url_prefix.strip("/")
        os.makedirs(self.output_dir, exist_ok=True)

    def save(self, image: GeneratedImage) -> str:
        """
        Decode the image and write it to a new uniquely named file.

        Returns:
            str: URL path of the file, e.g. "/outputs/<uuid>.png".

        Raises:
            StorageFailure: If the payload is not valid base64 or the write fails.
        """
        filename = f"{uuid.uuid4()}.{ext_from_mime(image.mime_type)}"
        try:
            data = base64.b64decode(image.base64_payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise StorageFailure(f"Generated image could not be decoded: {e}")

        path = os.path.join(self.output_dir, filename)
        try:
            # "xb" never overwrites an existing file
            with open(path, "xb") as f:
                f.write(data)
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise StorageFailure(f"Failed to save generated image: {e.strerror or e}")

        return f"{self.url_prefix}/{filename}"

    def discard(self, ref: str) -> None:
        """Remove a file previously returned by save()."""
        filename = os.path.basename(ref)
        try:
            os.remove(os.path.join(self.output_dir, filename))
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove {filename}: {e}")


class InlineImageStorage:
    def save(self, image: GeneratedImage) -> str:
        return to_data_url(image)

    def discard(self, ref: str) -> None:
        pass
