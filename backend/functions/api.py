"""
Serverless entrypoint (AWS Lambda-style event/context handler).

Function filesystems are read-only, so generated images are always
returned inline as data URLs. The app is built on the first invocation
and reused while the function stays warm.
"""

import logging
from typing import Optional

import serverless_wsgi
from flask import Flask

from backend.gateway.server import create_app
from backend.image_service.config import load_settings

logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(asctime)s - %(message)s")

_app: Optional[Flask] = None


def get_app() -> Flask:
    """
    Build (once) the relay app with inline output.

    Raises:
        StartupConfigurationError: If GEMINI_API_KEY is missing. The
        invocation fails and no request is served.
    """
    global _app
    if _app is None:
        _app = create_app(load_settings(output_mode="inline"))
    return _app


def handler(event, context):
    return serverless_wsgi.handle_request(get_app(), event, context)
