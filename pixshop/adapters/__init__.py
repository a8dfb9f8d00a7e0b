"""Generative service adapters."""

from .image_editing_adapter import BaseImageEditor, GeminiImageEditor, GeneratedImage, create_editor

__all__ = ["BaseImageEditor", "GeminiImageEditor", "GeneratedImage", "create_editor"]
