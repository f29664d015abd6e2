"""
Error types raised by the image relay.

Per-request errors derive from RelayError and carry the HTTP status the
blueprint answers with. StartupConfigurationError is raised while the app
is being built and is never turned into a response.
"""

from typing import Optional


class RelayError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequest(RelayError):
    status_code = 400


class GenerationFailed(RelayError):
    """The upstream call succeeded but returned no image parts."""

    def __init__(self, message: str, upstream_text: Optional[str] = None):
        super().__init__(message)
        self.upstream_text = upstream_text


class UpstreamFailure(RelayError):
    """The generation service itself raised."""


class StorageFailure(RelayError):
    """A generated image could not be written to the output directory."""


class StartupConfigurationError(RuntimeError):
    pass
