"""
Generative Image Editing Adapter

Unified interface to the external image-generation service:
- Localized retouch at a hotspot
- Global filter / adjustment
- Background replacement
- Freestyle instruction edits
- Plain text chat with conversational memory

The adapter never touches pixels itself: it builds the instruction,
sends the source image, and hands back whatever encoded image the
service returns.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional
import logging
import os

from ..errors import CollaboratorError

logger = logging.getLogger(__name__)


@dataclass
class GeneratedImage:
    """Encoded image returned by the service."""
    data: bytes = field(repr=False)
    mime_type: str = "image/png"


class BaseImageEditor(ABC):
    """Base class for generative editing backends."""

    def __init__(self, model_name: str, **kwargs):
        self.model_name = model_name
        self.kwargs = kwargs

    @abstractmethod
    def edit(self, image_data: bytes, mime_type: str, prompt: str) -> GeneratedImage:
        """
        Send one image plus a full prompt and return the generated image.

        Args:
            image_data: Encoded source image
            mime_type: MIME type of `image_data`
            prompt: Complete instruction for the model

        Returns:
            Generated image

        Raises:
            CollaboratorError: If the service fails or returns no image
        """
        pass

    @abstractmethod
    def chat(self, message: str) -> str:
        """Send a text message in the ongoing conversation and return the reply."""
        pass

    def retouch(self, image_data: bytes, mime_type: str, instruction: str, hotspot) -> GeneratedImage:
        """Localized edit at `hotspot` (natural pixel coordinates)."""
        prompt = (
            "You are an expert photo editor. Perform a natural, localized edit on the "
            f"provided image at the pixel location (x: {hotspot.natural_x}, y: {hotspot.natural_y}). "
            f"User request: \"{instruction}\". "
            "Blend the edit seamlessly with its surroundings; the rest of the image "
            "outside the edited area must remain identical to the original. "
            "Return only the final edited image."
        )
        return self.edit(image_data, mime_type, prompt)

    def apply_filter(self, image_data: bytes, mime_type: str, instruction: str) -> GeneratedImage:
        prompt = (
            "You are an expert photo editor. Apply a stylistic filter to the entire image "
            f"based on this request: \"{instruction}\". "
            "Do not change the composition or content, only apply the style. "
            "Return only the final filtered image."
        )
        return self.edit(image_data, mime_type, prompt)

    def apply_adjustment(self, image_data: bytes, mime_type: str, instruction: str) -> GeneratedImage:
        prompt = (
            "You are an expert photo editor. Perform a natural, global adjustment to the "
            f"entire image based on this request: \"{instruction}\". "
            "The result must remain photorealistic. "
            "Return only the final adjusted image."
        )
        return self.edit(image_data, mime_type, prompt)

    def replace_background(self, image_data: bytes, mime_type: str, instruction: str) -> GeneratedImage:
        prompt = (
            "You are an expert photo editor. Replace the background of the image with: "
            f"\"{instruction}\". Keep the main subject exactly as it is, and match the "
            "lighting of the new background to the subject. "
            "Return only the final image."
        )
        return self.edit(image_data, mime_type, prompt)

    def freestyle(self, image_data: bytes, mime_type: str, instruction: str) -> GeneratedImage:
        prompt = (
            f"Using the provided image, {instruction}. Ensure the change integrates "
            "naturally with the original style, lighting, and composition."
        )
        return self.edit(image_data, mime_type, prompt)


class GeminiImageEditor(BaseImageEditor):
    """Gemini 2.5 Flash Image (Nano Banana) adapter."""

    def __init__(
        self,
        model_name: str = "gemini-2.5-flash-image",
        chat_model: str = "gemini-2.5-flash",
        **kwargs
    ):
        super().__init__(model_name, **kwargs)
        self.chat_model = chat_model
        self._chat_session = None
        self._check_api_key()
        self._init_model()

    def _check_api_key(self):
        """Check if GOOGLE_API_KEY is set."""
        api_key = os.getenv('GOOGLE_API_KEY')
        if not api_key:
            raise ValueError(
                "\n" + "="*80 + "\n"
                "GOOGLE_API_KEY not found!\n\n"
                "Pixshop delegates every edit to Gemini, so an API key is required:\n\n"
                "1. Get your API key from: https://aistudio.google.com/apikey\n"
                "2. Set the environment variable:\n"
                "   export GOOGLE_API_KEY='your-api-key-here'\n"
                + "="*80
            )
        logger.info("✓ GOOGLE_API_KEY found")

    def _init_model(self):
        """Initialize Gemini client."""
        from google import genai
        from google.genai import types

        logger.info(f"Loading Gemini Image: {self.model_name}")

        self.client = genai.Client()
        self.types = types

        logger.info("✓ Gemini Image ready")

    def edit(self, image_data: bytes, mime_type: str, prompt: str) -> GeneratedImage:
        """Edit image with Gemini (text-and-image-to-image)."""
        contents = [
            self.types.Part.from_bytes(data=image_data, mime_type=mime_type),
            prompt,
        ]
        config = self.types.GenerateContentConfig(
            response_modalities=['Image'],  # Only return image, no text
        )

        logger.info(f"Gemini editing with prompt: {prompt[:100]}...")

        try:
            response = self.client.models.generate_content(
                model=self.model_name,
                contents=contents,
                config=config,
            )
        except Exception as e:
            raise CollaboratorError(None, f"Gemini request failed: {e}") from e

        return self._extract_image(response)

    def _extract_image(self, response) -> GeneratedImage:
        """Pull the first inline image out of a response, or explain why there is none."""
        feedback = getattr(response, "prompt_feedback", None)
        block_reason = getattr(feedback, "block_reason", None) if feedback else None
        if block_reason:
            raise CollaboratorError(None, f"Request was blocked ({block_reason})")

        candidates = response.candidates or []
        for candidate in candidates:
            content = candidate.content
            parts = content.parts if content and content.parts else []
            for part in parts:
                if part.inline_data is not None and part.inline_data.data:
                    return GeneratedImage(
                        data=part.inline_data.data,
                        mime_type=part.inline_data.mime_type or "image/png",
                    )

        finish_reason = getattr(candidates[0], "finish_reason", None) if candidates else None
        if finish_reason:
            raise CollaboratorError(None, f"No image generated in Gemini response (finish reason: {finish_reason})")
        raise CollaboratorError(None, "No image generated in Gemini response")

    def chat(self, message: str) -> str:
        """Chat with Gemini, keeping one conversation per editor."""
        if self._chat_session is None:
            self._chat_session = self.client.chats.create(model=self.chat_model)
            logger.info(f"Started Gemini chat with {self.chat_model}")

        try:
            response = self._chat_session.send_message(message)
        except Exception as e:
            raise CollaboratorError(None, f"Gemini chat failed: {e}") from e

        if not response.text:
            raise CollaboratorError(None, "Gemini returned an empty reply")
        return response.text


SUPPORTED_EDITORS = {
    'gemini': GeminiImageEditor,
}


def create_editor(editor_type: str = 'gemini', model_name: Optional[str] = None, **kwargs) -> BaseImageEditor:
    """
    Factory function to create an image editor.

    Args:
        editor_type: Backend type (currently only 'gemini')
        model_name: Optional model name (uses default if None)
        **kwargs: Backend-specific parameters

    Returns:
        BaseImageEditor instance

    Notes:
        - 'gemini' requires GOOGLE_API_KEY environment variable
    """
    if editor_type not in SUPPORTED_EDITORS:
        raise ValueError(f"Unsupported editor type: {editor_type}. Choose from {list(SUPPORTED_EDITORS.keys())}")

    editor_class = SUPPORTED_EDITORS[editor_type]
    if model_name:
        return editor_class(model_name=model_name, **kwargs)
    return editor_class(**kwargs)
