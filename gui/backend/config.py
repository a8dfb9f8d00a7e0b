"""
Configuration for Pixshop GUI Backend

Model names, limits and server settings, read from environment variables
with defaults suitable for local development.
"""

from pathlib import Path
import logging
import os

logger = logging.getLogger(__name__)

# Project root (pixshop-studio/)
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Generative service
EDITOR_TYPE = os.getenv("PIXSHOP_EDITOR", "gemini")
IMAGE_MODEL = os.getenv("PIXSHOP_IMAGE_MODEL", "gemini-2.5-flash-image")
CHAT_MODEL = os.getenv("PIXSHOP_CHAT_MODEL", "gemini-2.5-flash")

# Crop output density (1.0 = pixel-exact natural resolution)
PIXEL_DENSITY = float(os.getenv("PIXSHOP_PIXEL_DENSITY", "1.0"))

# Uploads larger than this are rejected
MAX_UPLOAD_MB = float(os.getenv("PIXSHOP_MAX_UPLOAD_MB", "20"))
MAX_UPLOAD_BYTES = int(MAX_UPLOAD_MB * 1024 * 1024)

# Frontend origins allowed by CORS (comma-separated)
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("PIXSHOP_CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
    if origin.strip()
]

logger.info(f"Editor: {EDITOR_TYPE} (image: {IMAGE_MODEL}, chat: {CHAT_MODEL})")
logger.info(f"Pixel density: {PIXEL_DENSITY}, max upload: {MAX_UPLOAD_MB} MB")


def get_editor():
    """
    Create the configured generative editor.

    Returns:
        BaseImageEditor instance

    Raises:
        ValueError: If the editor type is unknown or its API key is missing
    """
    from pixshop.adapters import create_editor

    if EDITOR_TYPE == "gemini":
        return create_editor("gemini", model_name=IMAGE_MODEL, chat_model=CHAT_MODEL)
    return create_editor(EDITOR_TYPE)
