"""
Runtime configuration for the image relay.
Values come from the environment (and a .env file, if present).
"""

import os
from dataclasses import dataclass, field, replace
from typing import List, Mapping, Optional

from dotenv import load_dotenv

from backend.image_service.errors import StartupConfigurationError

# Load .env only once here
load_dotenv()

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

OUTPUT_MODES = ("disk", "inline")
DEFAULT_MODEL = "gemini-2.5-flash-image"


@dataclass(frozen=True)
class Settings:
    gemini_api_key: str
    gemini_model: str = DEFAULT_MODEL
    output_mode: str = "disk"
    public_dir: str = os.path.join(PROJECT_ROOT, "public")
    output_dir_name: str = "outputs"
    include_upstream_text: bool = True
    spa_fallback: bool = True
    max_request_mb: int = 25
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    port: int = 3000

    @property
    def output_dir(self) -> str:
        return os.path.join(self.public_dir, self.output_dir_name)


def _as_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _as_int(name: str, value: Optional[str], default: int) -> int:
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise StartupConfigurationError(f"{name} must be an integer, got {value!r}")


def load_settings(environ: Optional[Mapping[str, str]] = None, **overrides) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        environ (Mapping, optional): Source of variables. Defaults to os.environ.
        **overrides: Field values that take precedence over the environment.

    Returns:
        Settings: The validated configuration.

    Raises:
        StartupConfigurationError: If GEMINI_API_KEY is missing or a value is invalid.
    """
    env = os.environ if environ is None else environ

    api_key = overrides.pop("gemini_api_key", None) or env.get("GEMINI_API_KEY")
    if not api_key:
        raise StartupConfigurationError("GEMINI_API_KEY is not set. Set it in .env or the environment")

    origins = env.get("CORS_ORIGINS", "*")
    settings = Settings(
        gemini_api_key=api_key,
        gemini_model=env.get("GEMINI_MODEL") or DEFAULT_MODEL,
        output_mode=(env.get("OUTPUT_MODE") or "disk").strip().lower(),
        public_dir=env.get("PUBLIC_DIR") or os.path.join(PROJECT_ROOT, "public"),
        output_dir_name=(env.get("OUTPUT_DIR_NAME") or "outputs").strip("/"),
        include_upstream_text=_as_bool(env.get("INCLUDE_UPSTREAM_TEXT"), True),
        spa_fallback=_as_bool(env.get("SPA_FALLBACK"), True),
        max_request_mb=_as_int("MAX_REQUEST_MB", env.get("MAX_REQUEST_MB"), 25),
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()] or ["*"],
        port=_as_int("PORT", env.get("PORT"), 3000),
    )
    if overrides:
        settings = replace(settings, **overrides)

    if settings.output_mode not in OUTPUT_MODES:
        raise StartupConfigurationError(
            f"OUTPUT_MODE must be one of {', '.join(OUTPUT_MODES)}, got {settings.output_mode!r}"
        )
    return settings
